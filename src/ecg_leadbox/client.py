"""HTTP transport to the conversion and analysis services."""

from typing import Any

import pydantic
import requests

from ._logging import logger
from .config import ServiceSettings
from .exceptions import TransportError
from .models import AnalysisResult, DigitizedRecord
from .payload import ConversionPayload


class ServiceClient:
    """Blocking client for the conversion and analysis endpoints.

    Every failure, whether the service is unreachable, answers with an error
    status or returns an unexpected body, is raised as a TransportError with a
    short message suitable for display. Requests are never retried.

    Args:
        settings: Service location and timeout
        session: requests session to send through. A new one is created if omitted.
    """

    def __init__(self, settings: ServiceSettings | None = None, session: requests.Session | None = None):
        self.settings = settings or ServiceSettings()
        self._http = session or requests.Session()

    def _post(self, path: str, body: dict[str, Any], failure: str) -> dict[str, Any]:
        url = self.settings.url(path)
        try:
            response = self._http.post(url, json=body, timeout=self.settings.timeout)
        except requests.RequestException as e:
            logger.error(f"POST {url} failed: {e}")
            raise TransportError(failure) from e

        if not response.ok:
            logger.error(f"POST {url} returned status {response.status_code}: {response.text[:200]}")
            raise TransportError(f"{failure} (status {response.status_code})")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"POST {url} returned a non-JSON body")
            raise TransportError(failure) from e

        if not isinstance(data, dict):
            logger.error(f"POST {url} returned {type(data).__name__}, expected an object")
            raise TransportError(failure)
        return data

    def convert(self, payload: ConversionPayload) -> DigitizedRecord:
        """Send a conversion request and parse the digitized record.

        Raises:
            TransportError: On connection errors, error statuses or malformed responses
        """
        logger.info(f"Requesting conversion {payload.token[:12]} for '{payload.image.filename}'")
        data = self._post(self.settings.convert_path, payload.to_request(), "Error contacting backend")
        try:
            record = DigitizedRecord.from_response(data["ptbxl_payload"])
        except (KeyError, pydantic.ValidationError) as e:
            logger.error(f"Malformed conversion response: {e}")
            raise TransportError("Error contacting backend (malformed response)") from e

        logger.info(f"Received record {record.record_id} with {len(record.leads)} leads")
        return record

    def analyze(self, record: DigitizedRecord) -> AnalysisResult:
        """Forward a digitized record to the analysis service.

        Raises:
            TransportError: On connection errors, error statuses or malformed responses
        """
        logger.info(f"Requesting analysis of record {record.record_id}")
        body = {"ptbxl": record.to_wire()}
        data = self._post(self.settings.analyze_path, body, "Error analyzing ECG")
        try:
            result = AnalysisResult.model_validate(data["result"])
        except (KeyError, pydantic.ValidationError) as e:
            logger.error(f"Malformed analysis response: {e}")
            raise TransportError("Error analyzing ECG (malformed response)") from e

        logger.info(f"Analysis of record {record.record_id} complete: rhythm={result.rhythm!r}")
        return result
