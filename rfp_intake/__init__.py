"""RFP Intake - RFP ingestion, text extraction and asynchronous LLM analysis."""

__version__ = "1.0.0"

from rfp_intake.errors import RfpIntakeError
from rfp_intake.models.records import AnalysisResult, RfpRecord, RfpStatus

__all__ = [
    "AnalysisResult",
    "RfpIntakeError",
    "RfpRecord",
    "RfpStatus",
]
