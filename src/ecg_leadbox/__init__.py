"""ecg-leadbox: manual lead-region annotation for digitizing 12-lead ECG images.

The operator delimits the twelve lead traces of a scanned ECG one at a time.
The package maps the selections into image pixel space, assembles a conversion
request for an external digitization service, renders scaled previews of the
returned waveforms and forwards the digitized record to an analysis service.
"""

from ._logging import logger, set_log_file, set_log_level
from .client import ServiceClient
from .config import ConfigLoader, ImageSettings, PreviewSettings, ServiceSettings, Settings
from .constants import CANONICAL_LEAD_ORDER, MIN_SCALE_FACTOR
from .exceptions import LeadboxError, StateError, TransportError, ValidationError
from .image import SourceImage
from .mapping import default_selection, display_ratio, map_to_display, map_to_image, next_selection
from .models import (
    AnalysisResult,
    DigitizedLead,
    DigitizedRecord,
    DisplayRect,
    LeadBoundary,
    PatientMetadata,
    ReportRequest,
)
from .payload import ConversionPayload, assemble
from .preview import PreviewPoints, render_preview, summarize_lead
from .session import (
    AnnotationSession,
    EventOutcome,
    RegionCaptured,
    SessionCancelled,
    SessionState,
    UndoRequested,
)
from .workflow import DigitizationWorkflow

__version__ = "0.1.0"
__all__ = [
    "__version__",
    "logger",
    "set_log_level",
    "set_log_file",
    "CANONICAL_LEAD_ORDER",
    "MIN_SCALE_FACTOR",
    "LeadboxError",
    "ValidationError",
    "StateError",
    "TransportError",
    "Settings",
    "ServiceSettings",
    "PreviewSettings",
    "ImageSettings",
    "ConfigLoader",
    "SourceImage",
    "DisplayRect",
    "LeadBoundary",
    "PatientMetadata",
    "DigitizedLead",
    "DigitizedRecord",
    "AnalysisResult",
    "ReportRequest",
    "display_ratio",
    "map_to_image",
    "map_to_display",
    "default_selection",
    "next_selection",
    "AnnotationSession",
    "SessionState",
    "RegionCaptured",
    "UndoRequested",
    "SessionCancelled",
    "EventOutcome",
    "ConversionPayload",
    "assemble",
    "PreviewPoints",
    "render_preview",
    "summarize_lead",
    "ServiceClient",
    "DigitizationWorkflow",
]


def __dir__():
    return __all__
