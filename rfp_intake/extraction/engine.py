"""Text extraction with a primary service and local fallback."""

import time
from pathlib import Path

from rfp_intake.errors import ExtractionFailed, ExtractionServiceUnavailable
from rfp_intake.extraction.normalize import count_words, normalize_text
from rfp_intake.extraction.service_client import ExtractionServiceClient
from rfp_intake.loaders import get_loader
from rfp_intake.models.records import ExtractedText, ExtractionMethod
from rfp_intake.utils.logging import LoggerMixin


class TextExtractionEngine(LoggerMixin):
    """Produces normalized text for a stored document."""

    def __init__(self, service_client: ExtractionServiceClient | None = None):
        """Initialize the engine.

        Args:
            service_client: Primary extraction service; None means the
                service is not configured and every document uses the
                local loaders.
        """
        self._service = service_client

    def extract(
        self,
        document_ref: Path | str,
        mime_hint: str | None = None,
        filename: str | None = None,
    ) -> ExtractedText:
        """Extract text from the document at ``document_ref``.

        Raises:
            ExtractionFailed: Both the service and the local loaders failed.
        """
        path = Path(document_ref)
        started = time.perf_counter()

        try:
            text, page_count, metadata = self._extract_primary(path, mime_hint)
            method = ExtractionMethod.PRIMARY
        except ExtractionServiceUnavailable as primary:
            self.log_warning(
                "Primary extraction unavailable, using local fallback",
                file=str(path),
                error=primary.message,
            )
            try:
                loaded = get_loader(path, mime_hint, filename).load()
            except Exception as fallback:
                self.log_error(
                    "Text extraction failed",
                    file=str(path),
                    primary_error=primary.message,
                    fallback_error=str(fallback),
                )
                raise ExtractionFailed(primary.message, str(fallback)) from fallback
            text, page_count, metadata = loaded.text, loaded.page_count, loaded.metadata
            method = ExtractionMethod.FALLBACK

        text = normalize_text(text)
        duration_ms = (time.perf_counter() - started) * 1000

        result = ExtractedText(
            text=text,
            word_count=count_words(text),
            character_count=len(text),
            page_count=page_count,
            method=method,
            duration_ms=round(duration_ms, 2),
            document_metadata=metadata,
        )
        self.log_info(
            "Text extracted",
            file=str(path),
            method=method.value,
            words=result.word_count,
            duration_ms=result.duration_ms,
        )
        return result

    def _extract_primary(self, path: Path, mime_hint: str | None):
        if self._service is None:
            raise ExtractionServiceUnavailable("Extraction service not configured")

        text = self._service.extract_text(path, mime_hint)
        metadata = self._service.extract_metadata(path, mime_hint)
        page_count = metadata.pop("page_count", None)
        return text, page_count, metadata

    def service_status(self) -> str:
        """``not_configured``, ``available`` or ``unavailable`` for the primary service."""
        if self._service is None:
            return "not_configured"
        return "available" if self._service.is_available() else "unavailable"
