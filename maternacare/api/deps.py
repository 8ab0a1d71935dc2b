"""FastAPI dependency injection functions for authentication and database access."""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from maternacare.core.exceptions import AdminRequiredException
from maternacare.core.security import decode_token
from maternacare.crud import crud_admin, crud_clinician
from maternacare.database import get_db
from maternacare.schemas.auth import SessionUser

logger = logging.getLogger(__name__)

# OAuth2 Bearer token scheme
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> SessionUser:
    """
    Dependency to get the signed-in admin or clinician from the session token.

    Args:
        token: JWT token from Authorization header
        db: Database session

    Returns:
        SessionUser: Identity carried by the token

    Raises:
        HTTPException: 401 if token is invalid or its subject no longer exists
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    subject: Optional[str] = payload.get("sub")
    if not subject or ":" not in subject:
        logger.warning("[AUTH] Token without a usable subject")
        raise credentials_exception

    user_type, _, raw_id = subject.partition(":")
    try:
        subject_id = int(raw_id)
    except ValueError:
        raise credentials_exception

    if user_type == "admin":
        found = crud_admin.get(db, subject_id) is not None
    elif user_type == "clinician":
        found = crud_clinician.get(db, subject_id) is not None
    else:
        found = False

    if not found:
        logger.warning(f"[AUTH] Subject not found: {subject}")
        raise credentials_exception

    return SessionUser.model_validate(payload["user"])


def require_admin(current_user: SessionUser = Depends(get_current_user)) -> SessionUser:
    """
    Dependency restricting an endpoint to administrators.

    Raises:
        HTTPException: 403 if the current user is not an admin
    """
    if not current_user.is_admin:
        logger.warning(f"[AUTH] Admin-only action refused for {current_user.name}")
        raise AdminRequiredException()
    return current_user


def clinician_scope(current_user: SessionUser) -> Optional[int]:
    """Clinician id listings must be restricted to, or None for admins."""
    if current_user.is_admin:
        return None
    return current_user.clinician_id


__all__ = [
    "oauth2_scheme",
    "get_db",
    "get_current_user",
    "require_admin",
    "clinician_scope",
]
