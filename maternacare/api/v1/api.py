"""API v1 router aggregator."""

from fastapi import APIRouter

from maternacare.api.v1.endpoints import (
    appointments,
    auth,
    clinicians,
    dashboard,
    exports,
    files,
    laboratory,
    patients,
    persons,
    records,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router)
api_router.include_router(patients.router)
api_router.include_router(clinicians.router)
api_router.include_router(persons.router)
api_router.include_router(appointments.router)
api_router.include_router(records.router)
api_router.include_router(laboratory.router)
api_router.include_router(files.router)
api_router.include_router(exports.router)
api_router.include_router(dashboard.router)

__all__ = ["api_router"]
