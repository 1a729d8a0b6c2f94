"""Client for the Apache Tika REST extraction service."""

from pathlib import Path
from typing import Any

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from rfp_intake.config import Settings
from rfp_intake.errors import ExtractionServiceUnavailable
from rfp_intake.utils.logging import LoggerMixin

# Tika metadata keys mapped to document metadata fields
_METADATA_KEYS = {
    "Content-Type": "content_type",
    "dc:title": "title",
    "dc:creator": "author",
    "language": "language",
    "dc:language": "language",
    "dcterms:created": "created",
    "dcterms:modified": "modified",
}
_PAGE_COUNT_KEYS = ("xmpTPg:NPages", "meta:page-count", "Page-Count")


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


class ExtractionServiceClient(LoggerMixin):
    """Sends documents to Tika for text and metadata.

    Text (``PUT /tika``) and metadata (``PUT /meta``) are separate calls.
    Timeouts are retried; any other transport error or a non-2xx response
    raises ``ExtractionServiceUnavailable``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retries: int = 1,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.retries = max(0, retries)
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ExtractionServiceClient | None":
        """Build a client, or None when no service URL is configured."""
        if not settings.extraction_service_url:
            return None
        return cls(
            settings.extraction_service_url,
            timeout=settings.extraction_timeout_seconds,
            retries=settings.extraction_service_retries,
        )

    def close(self) -> None:
        self._client.close()

    def _put(self, endpoint: str, path: Path, content_type: str | None, accept: str) -> httpx.Response:
        headers = {
            "Accept": accept,
            "Content-Type": content_type or "application/octet-stream",
        }
        try:
            body = path.read_bytes()
        except OSError as e:
            raise ExtractionServiceUnavailable(f"Cannot read document: {e}", endpoint=endpoint) from e

        retrying = Retrying(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            retry=retry_if_exception_type(httpx.TimeoutException),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    response = self._client.put(
                        f"{self.base_url}{endpoint}",
                        content=body,
                        headers=headers,
                    )
        except httpx.TimeoutException as e:
            raise ExtractionServiceUnavailable(
                f"Extraction service timed out after {self.retries + 1} attempt(s)",
                endpoint=endpoint,
            ) from e
        except httpx.HTTPError as e:
            raise ExtractionServiceUnavailable(
                f"Extraction service unreachable: {e}",
                endpoint=endpoint,
            ) from e

        if response.status_code in (415, 422):
            raise ExtractionServiceUnavailable(
                "Extraction service does not support this format",
                endpoint=endpoint,
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise ExtractionServiceUnavailable(
                f"Extraction service returned HTTP {response.status_code}",
                endpoint=endpoint,
                status_code=response.status_code,
            )
        return response

    def extract_text(self, path: Path, content_type: str | None = None) -> str:
        """Return the plain text Tika extracts from ``path``."""
        response = self._put("/tika", Path(path), content_type, accept="text/plain")
        self.log_debug("Extraction service returned text", file=str(path), characters=len(response.text))
        return response.text

    def extract_metadata(self, path: Path, content_type: str | None = None) -> dict[str, Any]:
        """Return document metadata; empty when the call fails."""
        try:
            response = self._put("/meta", Path(path), content_type, accept="application/json")
            raw = response.json()
        except (ExtractionServiceUnavailable, ValueError) as e:
            self.log_warning("Metadata extraction failed", file=str(path), error=str(e))
            return {}

        if not isinstance(raw, dict):
            return {}

        metadata: dict[str, Any] = {}
        for key, name in _METADATA_KEYS.items():
            value = _first(raw.get(key))
            if value and name not in metadata:
                metadata[name] = value
        for key in _PAGE_COUNT_KEYS:
            value = _first(raw.get(key))
            if value is not None:
                try:
                    metadata["page_count"] = int(value)
                except (TypeError, ValueError):
                    pass
                break
        return metadata

    def is_available(self) -> bool:
        """True when ``GET /tika`` answers with a non-error status."""
        try:
            response = self._client.get(f"{self.base_url}/tika")
        except httpx.HTTPError:
            return False
        return response.status_code < 400
