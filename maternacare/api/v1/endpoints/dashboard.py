"""Dashboard endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from maternacare.api.deps import clinician_scope, get_current_user, get_db
from maternacare.api.v1.endpoints.exports import file_response
from maternacare.schemas.auth import SessionUser
from maternacare.schemas.dashboard import DashboardExportOptions, DashboardExportRequest, DashboardSummary
from maternacare.services.dashboard import dashboard_service

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


@router.get(
    "/summary",
    response_model=DashboardSummary,
    summary="Get dashboard counts, distributions and today's appointments",
)
def get_summary(
    today: Optional[date] = Query(None, description="Override the current day (YYYY-MM-DD)"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DashboardSummary:
    return dashboard_service.get_summary(db, today=today, clinician_id=clinician_scope(current_user))


@router.post(
    "/export",
    summary="Export the dashboard summary",
    description="CSV rows are Category/Metric/Value. PDF renders the same sections.",
    responses={200: {"content": {"text/csv": {}, "application/pdf": {}}}},
)
def export_summary(
    export_in: DashboardExportRequest,
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    summary = dashboard_service.get_summary(db, clinician_id=clinician_scope(current_user))
    options = export_in.export_options or DashboardExportOptions()
    return file_response(dashboard_service.export(summary, options, export_in.export_format))
