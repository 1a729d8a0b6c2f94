"""Text extraction."""

from rfp_intake.extraction.engine import TextExtractionEngine
from rfp_intake.extraction.normalize import count_words, normalize_text
from rfp_intake.extraction.service_client import ExtractionServiceClient

__all__ = ["ExtractionServiceClient", "TextExtractionEngine", "count_words", "normalize_text"]
