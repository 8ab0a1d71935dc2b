from .person import (
	PersonBase,
	PersonUpdate,
	PersonResponse,
	PersonSummary,
	PersonStatusUpdate,
	PatientCreate,
	PatientUpdate,
	PatientResponse,
	PatientSummary,
	ClinicianCreate,
	ClinicianUpdate,
	ClinicianResponse,
	ClinicianSummary,
)
from .appointment import (
	AppointmentCreate,
	AppointmentUpdate,
	AppointmentResponse,
	AppointmentDetail,
	AppointmentStatusUpdate,
	PaymentStatusUpdate,
)
from .vitals import (
	VitalsFields,
	AppointmentMeasurements,
	VitalsSave,
	VitalsResponse,
)
from .prescription import (
	PrescriptionCreate,
	PrescriptionUpdate,
	PrescriptionResponse,
)
from .supplement import (
	SupplementCreate,
	SupplementUpdate,
	SupplementResponse,
)
from .allergy import (
	AllergyCreate,
	AllergyResponse,
)
from .laboratory_record import (
	LaboratoryRecordCreate,
	LaboratoryRecordResponse,
)
from .export import (
	ExportContent,
	ExportFilters,
	AppointmentExportRequest,
	SingleAppointmentExportRequest,
)
from .auth import (
	LoginRequest,
	LoginResponse,
	SessionUser,
)

__all__ = [
	# Person
	"PersonBase",
	"PersonUpdate",
	"PersonResponse",
	"PersonSummary",
	"PersonStatusUpdate",
	"PatientCreate",
	"PatientUpdate",
	"PatientResponse",
	"PatientSummary",
	"ClinicianCreate",
	"ClinicianUpdate",
	"ClinicianResponse",
	"ClinicianSummary",
	# Appointment
	"AppointmentCreate",
	"AppointmentUpdate",
	"AppointmentResponse",
	"AppointmentDetail",
	"AppointmentStatusUpdate",
	"PaymentStatusUpdate",
	# Vitals
	"VitalsFields",
	"AppointmentMeasurements",
	"VitalsSave",
	"VitalsResponse",
	# Patient records
	"PrescriptionCreate",
	"PrescriptionUpdate",
	"PrescriptionResponse",
	"SupplementCreate",
	"SupplementUpdate",
	"SupplementResponse",
	"AllergyCreate",
	"AllergyResponse",
	"LaboratoryRecordCreate",
	"LaboratoryRecordResponse",
	# Export
	"ExportContent",
	"ExportFilters",
	"AppointmentExportRequest",
	"SingleAppointmentExportRequest",
	# Auth
	"LoginRequest",
	"LoginResponse",
	"SessionUser",
]
