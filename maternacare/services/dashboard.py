"""Service layer for the dashboard summary and its export."""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import distinct, func, select
from sqlalchemy.orm import Session

from maternacare.crud.appointment import crud_appointment
from maternacare.crud.clinician import crud_clinician
from maternacare.crud.patient import crud_patient
from maternacare.models.appointment import Appointment
from maternacare.models.clinician import Clinician
from maternacare.models.patient import Patient
from maternacare.models.person import Person
from maternacare.schemas.appointment import AppointmentDetail
from maternacare.schemas.dashboard import (
    AgeBucket,
    ClinicianLoad,
    DashboardExportOptions,
    DashboardSummary,
    TodayAppointment,
)
from maternacare.services.export_composer import (
    CSV_MEDIA_TYPE,
    PDF_MEDIA_TYPE,
    ExportFile,
    sections_csv,
)
from maternacare.services.pdf_report import ReportSection, render_report

logger = logging.getLogger(__name__)


class DashboardService:
    """Aggregates shown on the dashboard landing page."""

    def age_distribution(self, db: Session) -> List[AgeBucket]:
        stmt = (
            select(Person.age, func.count(Person.id))
            .join(Patient, Patient.id == Person.id)
            .where(Person.age.is_not(None))
            .group_by(Person.age)
            .order_by(Person.age)
        )
        return [AgeBucket(age=age, number_of_patients=count) for age, count in db.execute(stmt).all()]

    def clinician_distribution(self, db: Session) -> List[ClinicianLoad]:
        """Distinct patients seen per clinician."""
        stmt = (
            select(Clinician.id, func.count(distinct(Appointment.patient_id)))
            .join(Appointment, Appointment.clinician_id == Clinician.id)
            .group_by(Clinician.id)
            .order_by(Clinician.id)
        )
        loads = []
        for clinician_id, count in db.execute(stmt).all():
            clinician = crud_clinician.get(db, clinician_id)
            loads.append(ClinicianLoad(
                clinician_id=clinician_id,
                clinician_name=clinician.person.full_name,
                number_of_patients=count,
            ))
        return loads

    def todays_appointments(self, db: Session, *, today: Optional[date] = None, clinician_id: Optional[int] = None) -> List[TodayAppointment]:
        rows = crud_appointment.get_for_day(db, day=today or date.today(), clinician_id=clinician_id)
        result = []
        for appointment in rows:
            detail = AppointmentDetail.model_validate(appointment)
            result.append(TodayAppointment(
                id=appointment.id,
                patient_id=appointment.patient_id,
                clinician_id=appointment.clinician_id,
                date=appointment.date,
                service=appointment.service,
                status=appointment.status,
                payment_status=appointment.payment_status,
                patient_name=detail.patient_name,
                clinician_name=detail.clinician_name,
            ))
        return result

    def get_summary(self, db: Session, *, today: Optional[date] = None, clinician_id: Optional[int] = None) -> DashboardSummary:
        return DashboardSummary(
            active_patients=crud_patient.count_active(db),
            active_clinicians=crud_clinician.count_active(db),
            total_appointments=crud_appointment.count(db),
            todays_appointments=self.todays_appointments(db, today=today, clinician_id=clinician_id),
            age_distribution=self.age_distribution(db),
            clinician_distribution=self.clinician_distribution(db),
        )

    def report_sections(self, summary: DashboardSummary, options: DashboardExportOptions) -> List[ReportSection]:
        sections: List[ReportSection] = []
        if options.overview:
            sections.append(ReportSection("Overview", [("Overview", [
                ("Active Patients", str(summary.active_patients)),
                ("Active Clinicians", str(summary.active_clinicians)),
                ("Total Appointments", str(summary.total_appointments)),
            ])]))
        if options.age_distribution:
            rows = [(f"Age {b.age}", str(b.number_of_patients)) for b in summary.age_distribution]
            sections.append(ReportSection(
                "Age Distribution",
                [("Age Distribution", rows)] if rows else [],
                empty_message="No patient data found",
            ))
        if options.clinician_distribution:
            rows = [(c.clinician_name, str(c.number_of_patients)) for c in summary.clinician_distribution]
            sections.append(ReportSection(
                "Clinician Distribution",
                [("Clinician Distribution", rows)] if rows else [],
                empty_message="No appointments recorded",
            ))
        if options.appointments:
            rows = []
            for index, appointment in enumerate(summary.todays_appointments, start=1):
                rows.extend([
                    (f"Appointment {index} Patient", appointment.patient_name),
                    (f"Appointment {index} Clinician", appointment.clinician_name),
                    (f"Appointment {index} Date", appointment.date.strftime("%Y-%m-%d %H:%M")),
                    (f"Appointment {index} Service", appointment.service),
                    (f"Appointment {index} Status", appointment.status),
                    (f"Appointment {index} Payment Status", appointment.payment_status),
                ])
            sections.append(ReportSection(
                "Today's Appointments",
                [("Today's Appointments", rows)] if rows else [],
                empty_message="No appointments today",
            ))
        return sections

    def export(self, summary: DashboardSummary, options: DashboardExportOptions, export_format: str = "csv") -> ExportFile:
        sections = self.report_sections(summary, options)
        stamp = date.today().isoformat()
        if export_format == "csv":
            body = sections_csv(sections, value_header="Metric")
            return ExportFile(f"Dashboard_Report_{stamp}.csv", CSV_MEDIA_TYPE, body.encode("utf-8"))
        pdf = render_report("Dashboard Report", sections)
        logger.info("Dashboard PDF report rendered")
        return ExportFile(f"Dashboard_Report_{stamp}.pdf", PDF_MEDIA_TYPE, pdf)


# Singleton instance
dashboard_service = DashboardService()
