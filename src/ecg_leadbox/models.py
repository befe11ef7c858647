"""Pydantic models for regions, patient metadata and service responses."""

import copy
from datetime import datetime, timezone
from typing import Any, Literal

import numpy as np
import pandas as pd
import pydantic
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .constants import CANONICAL_LEAD_ORDER, LEAD_INDEX


def _check_lead_name(name: str) -> str:
    if name not in LEAD_INDEX:
        raise ValueError(f"Invalid lead name '{name}'. Allowed lead names are: {list(CANONICAL_LEAD_ORDER)}")
    return name


class DisplayRect(BaseModel):
    """A selection rectangle in display (rendered) pixel space.

    Attributes:
        x: Left edge
        y: Top edge
        w: Width, non-negative
        h: Height, non-negative
    """

    model_config = ConfigDict(frozen=True)

    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    w: float = Field(ge=0, allow_inf_nan=False)
    h: float = Field(ge=0, allow_inf_nan=False)


class LeadBoundary(BaseModel):
    """Rectangular region of one lead trace in original image pixel space.

    Bounds against the image size are enforced by the coordinate mapper, the
    model itself only guarantees a non-empty, non-negative box.
    """

    model_config = ConfigDict(frozen=True)

    lead_name: str
    x1: int = Field(ge=0)
    y1: int = Field(ge=0)
    x2: int = Field(ge=0)
    y2: int = Field(ge=0)

    @pydantic.field_validator("lead_name")
    @classmethod
    def validate_lead_name(cls, v: str) -> str:
        return _check_lead_name(v)

    @pydantic.model_validator(mode="after")
    def check_extent(self) -> "LeadBoundary":
        if self.x2 <= self.x1 or self.y2 <= self.y1:
            raise ValueError(
                f"Degenerate boundary for lead {self.lead_name}: "
                f"({self.x1},{self.y1})-({self.x2},{self.y2})"
            )
        return self

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    def as_box(self) -> list[int]:
        """Return the box in wire order ``[y1, y2, x1, x2]``."""
        return [self.y1, self.y2, self.x1, self.x2]


class PatientMetadata(BaseModel):
    """Patient and recording information sent along with a conversion request.

    Empty strings for age and sex are treated as missing, as they come from
    optional form fields.
    """

    model_config = ConfigDict(frozen=True)

    patient_name: str = ""
    patient_age: str | None = None
    patient_sex: Literal["M", "F", "O"] | None = None
    recording_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source_file: str = ""
    note: str = ""

    @pydantic.field_validator("patient_age", "patient_sex", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, int):
            return str(v)
        return v


class DigitizedLead(BaseModel):
    """Millivolt samples of one lead as returned by the conversion service."""

    model_config = ConfigDict(extra="allow")

    name: str
    samples: list[float] = Field(default_factory=list)

    @pydantic.field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_lead_name(v)

    @pydantic.field_validator("samples", mode="before")
    @classmethod
    def coerce_array(cls, v: Any) -> Any:
        if isinstance(v, np.ndarray):
            return v.astype(float).tolist()
        return v


class DigitizedRecord(BaseModel):
    """Structured output of the conversion service.

    Unknown fields are kept so the record can be forwarded to the analysis
    service exactly as it was received.
    """

    model_config = ConfigDict(extra="allow")

    record_id: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    leads: list[DigitizedLead]
    _wire: dict[str, Any] | None = PrivateAttr(default=None)

    @classmethod
    def from_response(cls, body: dict[str, Any]) -> "DigitizedRecord":
        """Validate a conversion response and keep a copy of it for forwarding."""
        record = cls.model_validate(body)
        record._wire = copy.deepcopy(body)
        return record

    def to_wire(self) -> dict[str, Any]:
        """The record as received from the conversion service.

        Records built directly rather than from a response are serialized from
        their fields.
        """
        if self._wire is not None:
            return copy.deepcopy(self._wire)
        return self.model_dump(mode="json")

    def lead(self, name: str) -> DigitizedLead:
        """Return the lead with the given name.

        Raises:
            KeyError: If the record has no such lead
        """
        for lead in self.leads:
            if lead.name == name:
                return lead
        raise KeyError(f"Lead '{name}' not found. Available leads: {[lead.name for lead in self.leads]}")

    def to_dataframe(self) -> pd.DataFrame:
        """Return the samples as a DataFrame with one column per lead.

        Columns follow the canonical lead order. Leads of different length are
        padded with NaN.
        """
        ordered = sorted(self.leads, key=lambda lead: LEAD_INDEX[lead.name])
        return pd.DataFrame({lead.name: pd.Series(lead.samples, dtype=float) for lead in ordered})


class CardiacAxis(BaseModel):
    model_config = ConfigDict(extra="allow")

    frontal: float | None = None


class AnalysisResult(BaseModel):
    """Output of the analysis service."""

    model_config = ConfigDict(extra="allow")

    cardiac_axis: CardiacAxis = Field(default_factory=CardiacAxis)
    rhythm: str = ""
    probabilities: dict[str, float] = Field(default_factory=dict)

    @pydantic.field_validator("probabilities")
    @classmethod
    def validate_probabilities(cls, v: dict[str, float]) -> dict[str, float]:
        out_of_range = {label: p for label, p in v.items() if not 0.0 <= p <= 1.0}
        if out_of_range:
            raise ValueError(f"Probabilities must lie in [0, 1], got {out_of_range}")
        return v

    def ranked_probabilities(self) -> list[tuple[str, float]]:
        """Return ``(label, probability)`` pairs, most likely first."""
        return sorted(self.probabilities.items(), key=lambda item: item[1], reverse=True)


class ReportRequest(BaseModel):
    """Everything a report exporter needs to lay out a document."""

    model_config = ConfigDict(frozen=True)

    record_id: str
    metadata: dict[str, Any]
    analysis: AnalysisResult
    source_image: bytes
    source_format: str

    @property
    def filename(self) -> str:
        return f"ecg_report_{self.record_id}.pdf"
