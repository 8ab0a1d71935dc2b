"""Services package for MaternaCare application."""

from .vitals_recorder import vitals_recorder, VitalsRecorder, VitalsSaveResult
from .export_composer import export_composer, ExportComposer, ExportFile
from .status_transition import StatusTransitionHelper, TransitionState
from .dashboard import dashboard_service, DashboardService

__all__ = [
    "vitals_recorder",
    "VitalsRecorder",
    "VitalsSaveResult",
    "export_composer",
    "ExportComposer",
    "ExportFile",
    "StatusTransitionHelper",
    "TransitionState",
    "dashboard_service",
    "DashboardService",
]
