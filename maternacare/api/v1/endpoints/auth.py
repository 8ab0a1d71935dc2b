"""Authentication endpoints."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from maternacare.api.deps import get_current_user, get_db
from maternacare.core.exceptions import InvalidCredentialsException
from maternacare.core.security import create_access_token
from maternacare.crud import crud_admin, crud_clinician
from maternacare.schemas.auth import LoginRequest, LoginResponse, SessionUser

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


def _issue(subject: str, user: SessionUser) -> LoginResponse:
    access_token = create_access_token(
        data={"sub": subject, "user": user.model_dump(by_alias=True)},
    )
    return LoginResponse(access_token=access_token, user=user)


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_200_OK,
    summary="Login admin or clinician",
    description="""
    Login with full name and password.

    The name is matched case-insensitively against "first middle last" of
    administrators first, then clinicians.

    **Returns:** bearer token and the session identity
    (name, firstName, role, userType, isAdmin, isDoctor, clinicianId).
    """,
)
def login(
    login_in: LoginRequest,
    db: Session = Depends(get_db),
) -> LoginResponse:
    """Login with name and password."""
    admin = crud_admin.authenticate(db, name=login_in.name, password=login_in.password)
    if admin:
        logger.info(f"Admin logged in: id={admin.id}")
        return _issue(f"admin:{admin.id}", SessionUser(
            name=admin.full_name,
            first_name=admin.first_name,
            role=admin.role,
            user_type="admin",
            is_admin=True,
        ))

    clinician = crud_clinician.authenticate(db, name=login_in.name, password=login_in.password)
    if clinician:
        if clinician.person.status != "Active":
            logger.warning(f"Inactive clinician tried to log in: id={clinician.id}")
            raise InvalidCredentialsException("Account is inactive")
        logger.info(f"Clinician logged in: id={clinician.id}")
        return _issue(f"clinician:{clinician.id}", SessionUser(
            name=clinician.person.full_name,
            first_name=clinician.person.first_name,
            role=clinician.role,
            avatar=clinician.person.fileurl,
            user_type="clinician",
            is_admin=False,
            is_doctor=clinician.role == "Doctor",
            clinician_id=clinician.id,
        ))

    logger.warning("Failed login attempt")
    raise InvalidCredentialsException()


@router.get(
    "/me",
    response_model=SessionUser,
    response_model_by_alias=True,
    summary="Get current session identity",
)
def read_me(current_user: SessionUser = Depends(get_current_user)) -> SessionUser:
    return current_user
