"""Orchestration of annotation, conversion, preview and analysis."""

import asyncio

from ._logging import logger
from .client import ServiceClient
from .config import Settings
from .exceptions import StateError, ValidationError
from .image import SourceImage
from .mapping import default_selection, next_selection
from .models import AnalysisResult, DigitizedRecord, DisplayRect, PatientMetadata, ReportRequest
from .payload import ConversionPayload, assemble
from .preview import PreviewPoints, render_preview
from .session import AnnotationSession
from .types import Size


class DigitizationWorkflow:
    """State of one operator working on one ECG image at a time.

    Loading an image starts a new annotation session and discards any earlier
    record and analysis. At most one conversion and one analysis request are in
    flight. A response is only applied if the session, or for analysis the
    record, it was requested for is still current; otherwise it is dropped.

    Args:
        settings: Settings object. If None, uses default settings.
        client: Service client. If None, one is built from ``settings.service``.

    Examples:
        workflow = DigitizationWorkflow()
        session = workflow.load_image(SourceImage.from_path("ecg.png"))
        ...  # capture twelve regions on session
        record = asyncio.run(workflow.convert(PatientMetadata(patient_name="Jane Doe")))
        analysis = asyncio.run(workflow.analyze())
    """

    def __init__(self, settings: Settings | None = None, client: ServiceClient | None = None):
        self.settings = settings or Settings()
        self.client = client or ServiceClient(self.settings.service)
        self.image: SourceImage | None = None
        self.session: AnnotationSession | None = None
        self.record: DigitizedRecord | None = None
        self.analysis: AnalysisResult | None = None
        self.converting = False
        self.analyzing = False

    def load_image(self, image: SourceImage) -> AnnotationSession:
        """Start over with a new image and an empty annotation session."""
        self.image = image
        self.session = AnnotationSession(image.size)
        self.record = None
        self.analysis = None
        logger.info(f"Started annotation session {self.session.session_id[:8]} for '{image.filename}'")
        return self.session

    def load_file(self, data: bytes, filename: str) -> AnnotationSession:
        """Validate uploaded bytes and start a session on them."""
        image = SourceImage.from_bytes(data, filename=filename, max_bytes=self.settings.image.max_bytes)
        return self.load_image(image)

    def initial_selection(self, display_size: Size | None = None) -> DisplayRect:
        """Selection box to offer on a freshly rendered image."""
        if display_size is None:
            if self.image is None:
                raise ValidationError("Upload an ECG image first.")
            display_size = self.image.size
        return default_selection(display_size, self.settings.image.min_box_size)

    def following_selection(self, rect: DisplayRect) -> DisplayRect:
        """Selection box to offer after ``rect`` was captured."""
        return next_selection(rect, self.settings.image.next_box_offset)

    def _require_session(self) -> AnnotationSession:
        if self.image is None or self.session is None:
            raise ValidationError("Upload an ECG image first.")
        return self.session

    def build_payload(self, metadata: PatientMetadata, scale_factor: float | None = None) -> ConversionPayload:
        """Assemble a conversion request from the current session.

        Metadata without a note or source file name gets the configured note
        and the image's file name.
        """
        session = self._require_session()
        updates = {}
        if not metadata.note:
            updates["note"] = self.settings.note
        if not metadata.source_file:
            updates["source_file"] = self.image.filename
        if updates:
            metadata = metadata.model_copy(update=updates)
        if scale_factor is None:
            scale_factor = self.settings.pixels_per_mv
        return assemble(session, metadata, scale_factor, self.image)

    def _is_current(self, payload: ConversionPayload) -> bool:
        session = self.session
        return (
            session is not None
            and session.session_id == payload.session_id
            and session.revision == payload.session_revision
        )

    async def convert(self, metadata: PatientMetadata, scale_factor: float | None = None) -> DigitizedRecord | None:
        """Send the current annotation to the conversion service.

        Returns:
            The digitized record, or None if the response arrived after the
            session was cancelled, edited or replaced

        Raises:
            ValidationError: If no image is loaded or the payload cannot be assembled
            StateError: If a conversion is already in flight
            TransportError: If the service call fails
        """
        if self.converting:
            raise StateError("A conversion is already in progress.")
        payload = self.build_payload(metadata, scale_factor)

        self.converting = True
        try:
            record = await asyncio.to_thread(self.client.convert, payload)
        finally:
            self.converting = False

        if not self._is_current(payload):
            logger.warning(f"Dropping stale conversion response for payload {payload.token[:12]}")
            return None

        self.record = record
        self.analysis = None
        return record

    async def analyze(self) -> AnalysisResult | None:
        """Send the current digitized record to the analysis service.

        Returns:
            The analysis result, or None if the record was replaced meanwhile

        Raises:
            ValidationError: If there is no digitized record yet
            StateError: If an analysis is already in flight
            TransportError: If the service call fails
        """
        if self.record is None:
            raise ValidationError("Convert first.")
        if self.analyzing:
            raise StateError("An analysis is already in progress.")

        record = self.record
        self.analyzing = True
        try:
            result = await asyncio.to_thread(self.client.analyze, record)
        finally:
            self.analyzing = False

        if self.record is not record:
            logger.warning(f"Dropping stale analysis response for record {record.record_id}")
            return None

        self.analysis = result
        return result

    def previews(self, scale_factor: float | None = None, baseline: float | None = None) -> dict[str, PreviewPoints]:
        """Waveform previews of every lead in the current record, keyed by lead name."""
        if self.record is None:
            return {}
        scale = self.settings.pixels_per_mv if scale_factor is None else scale_factor
        base = self.settings.preview.baseline if baseline is None else baseline
        return {
            lead.name: render_preview(lead.samples, scale, base, self.settings.preview.max_points)
            for lead in self.record.leads
        }

    def report_request(self) -> ReportRequest:
        """Collect what a report exporter needs.

        Raises:
            ValidationError: If no analysis has been run for the current record
        """
        if self.record is None or self.analysis is None or self.image is None:
            raise ValidationError("Run analysis first to generate report.")
        return ReportRequest(
            record_id=self.record.record_id,
            metadata=self.record.metadata,
            analysis=self.analysis,
            source_image=self.image.data,
            source_format=self.image.format,
        )
