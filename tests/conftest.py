"""Shared test fixtures for ecg-leadbox tests."""

from io import BytesIO
from typing import Any

import neurokit2 as nk
import numpy as np
import pytest
import requests
from PIL import Image

from ecg_leadbox import (
    CANONICAL_LEAD_ORDER,
    AnnotationSession,
    DisplayRect,
    PatientMetadata,
    SourceImage,
)

IMAGE_SIZE = (800, 600)


def make_image_bytes(size: tuple[int, int] = IMAGE_SIZE, fmt: str = "PNG") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color="white").save(buffer, format=fmt)
    return buffer.getvalue()


def grid_rects(size: tuple[int, int] = IMAGE_SIZE) -> list[DisplayRect]:
    """Twelve selections laid out as a 4x3 grid, row by row."""
    width, height = size
    cell_w, cell_h = width // 4, height // 3
    return [
        DisplayRect(x=col * cell_w + 2, y=row * cell_h + 3, w=cell_w - 4, h=cell_h - 6)
        for row in range(3)
        for col in range(4)
    ]


def capture(session: AnnotationSession, n: int, ratio: float = 1.0) -> None:
    for rect in grid_rects()[:n]:
        session.capture_region(rect, ratio)


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def source_image(png_bytes: bytes) -> SourceImage:
    return SourceImage.from_bytes(png_bytes, filename="ecg.png")


@pytest.fixture
def rects() -> list[DisplayRect]:
    return grid_rects()


@pytest.fixture
def complete_session() -> AnnotationSession:
    session = AnnotationSession(IMAGE_SIZE, session_id="test-session")
    capture(session, 12)
    return session


@pytest.fixture
def metadata() -> PatientMetadata:
    return PatientMetadata(patient_name="Jane Doe", patient_age="54", patient_sex="F", source_file="ecg.png")


@pytest.fixture
def lead_samples() -> np.ndarray:
    """Synthetic 12-lead ECG in millivolts.

    Returns:
        Array with shape (n_channels, n_timepoints), channels in canonical lead order
    """
    ecg = nk.ecg_simulate(
        duration=10,
        sampling_rate=100,
        noise=0.01,
        heart_rate=70,
        method="multileads",
        random_state=0,
    )
    return np.asarray(ecg, dtype=float).T


@pytest.fixture
def record_data(lead_samples: np.ndarray) -> dict[str, Any]:
    """Conversion service body for the synthetic ECG."""
    return {
        "record_id": "rec-0001",
        "metadata": {"patient_name": "Jane Doe", "recording_date": "2024-05-01T10:00:00Z"},
        "leads": [
            {"name": name, "samples": lead_samples[i].tolist()}
            for i, name in enumerate(CANONICAL_LEAD_ORDER)
        ],
    }


@pytest.fixture
def analysis_data() -> dict[str, Any]:
    return {
        "cardiac_axis": {"frontal": 45.0},
        "rhythm": "Sinus rhythm",
        "probabilities": {"NORM": 0.82, "MI": 0.05, "STTC": 0.13},
    }


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else repr(body)

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._body


class FakeHTTP:
    """Records POST calls and replies from a url-suffix -> response table."""

    def __init__(self, responses: dict[str, FakeResponse | Exception]):
        self.responses = responses
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, json: dict[str, Any], timeout: float) -> FakeResponse:
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        for suffix, reply in self.responses.items():
            if url.endswith(suffix):
                if isinstance(reply, Exception):
                    raise reply
                return reply
        raise requests.ConnectionError(f"No route to {url}")
