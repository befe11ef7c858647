"""Assembly of conversion requests from a completed annotation session."""

import hashlib
import json
import math
from typing import Any

from pydantic import BaseModel, ConfigDict

from ._logging import logger
from .constants import LEAD_INDEX, MIN_SCALE_FACTOR, N_LEADS
from .exceptions import ValidationError
from .image import SourceImage
from .models import LeadBoundary, PatientMetadata
from .session import AnnotationSession


class ConversionPayload(BaseModel):
    """Immutable conversion request for one attempt.

    Attributes:
        metadata: Patient and recording information
        image: The annotated source image
        lead_boundaries: Twelve boundaries in canonical lead order
        scale_factor: Pixels per millivolt
        session_id: Identity of the session the boundaries came from
        session_revision: Revision of that session at assembly time
        token: Digest identifying this request, used to match its response
    """

    model_config = ConfigDict(frozen=True)

    metadata: PatientMetadata
    image: SourceImage
    lead_boundaries: tuple[LeadBoundary, ...]
    scale_factor: float
    session_id: str
    session_revision: int
    token: str

    def lead_boxes(self) -> list[list[int]]:
        """Boxes as ``[y1, y2, x1, x2]`` in canonical lead order."""
        return [b.as_box() for b in self.lead_boundaries]

    def to_request(self) -> dict[str, Any]:
        """JSON body for the conversion service."""
        return {
            "metadata": self.metadata.model_dump(mode="json"),
            "image_base64": self.image.data_url(),
            "lead_boxes": self.lead_boxes(),
            "pixels_per_mv": self.scale_factor,
        }


def _payload_token(
    session: AnnotationSession,
    metadata: PatientMetadata,
    image: SourceImage,
    boundaries: tuple[LeadBoundary, ...],
    scale_factor: float,
) -> str:
    content = {
        "session": [session.session_id, session.revision],
        "metadata": metadata.model_dump(mode="json"),
        "image": image.digest,
        "lead_boxes": [b.as_box() for b in boundaries],
        "pixels_per_mv": scale_factor,
    }
    return hashlib.sha256(json.dumps(content, sort_keys=True).encode("utf-8")).hexdigest()


def assemble(
    session: AnnotationSession,
    metadata: PatientMetadata,
    scale_factor: float,
    image: SourceImage,
) -> ConversionPayload:
    """Build the conversion request for a completed session.

    The session is only read. Boundaries are sorted by canonical lead position
    rather than taken in capture order.

    Args:
        session: Annotation session holding all twelve boundaries
        metadata: Patient and recording information
        scale_factor: Pixels per millivolt, at least 5
        image: Source image the session was annotated on

    Returns:
        A new ConversionPayload

    Raises:
        ValidationError: If the session is incomplete, the patient name is
            empty or the scale factor is below the minimum
    """
    if not session.is_complete:
        raise ValidationError(
            f"Please mark all {N_LEADS} lead regions before converting ({session.current_index}/{N_LEADS} set)."
        )
    if not metadata.patient_name.strip():
        raise ValidationError("Please enter patient name.")
    if not (math.isfinite(scale_factor) and scale_factor >= MIN_SCALE_FACTOR):
        raise ValidationError(f"Pixels per mV must be at least {MIN_SCALE_FACTOR}, got {scale_factor}.")
    if session.image_size != image.size:
        raise ValidationError(f"Session was annotated on a {session.image_size} image, got {image.size}.")

    boundaries = tuple(sorted(session.boundaries, key=lambda b: LEAD_INDEX[b.lead_name]))
    scale_factor = float(scale_factor)
    payload = ConversionPayload(
        metadata=metadata,
        image=image,
        lead_boundaries=boundaries,
        scale_factor=scale_factor,
        session_id=session.session_id,
        session_revision=session.revision,
        token=_payload_token(session, metadata, image, boundaries, scale_factor),
    )
    logger.debug(f"Assembled conversion payload {payload.token[:12]} for session {session.session_id[:8]}")
    return payload
