"""Data models for RFP Intake."""

from rfp_intake.models.records import (
    AnalysisJob,
    AnalysisResult,
    BudgetRange,
    EvaluationCriterion,
    ExtractedText,
    ExtractionMetadata,
    ExtractionMethod,
    JobHandle,
    KeyDate,
    NackOutcome,
    Requirement,
    RfpRecord,
    RfpStatus,
    SourceMetadata,
)
from rfp_intake.models.requests import TriggerAnalysisRequest, UploadMetadata
from rfp_intake.models.responses import (
    ErrorResponse,
    HealthResponse,
    QueueStatsResponse,
    RfpStatusResponse,
    RubricResponse,
    TriggerAnalysisResponse,
    UploadResponse,
)

__all__ = [
    "AnalysisJob",
    "AnalysisResult",
    "BudgetRange",
    "EvaluationCriterion",
    "ExtractedText",
    "ExtractionMetadata",
    "ExtractionMethod",
    "JobHandle",
    "KeyDate",
    "NackOutcome",
    "Requirement",
    "RfpRecord",
    "RfpStatus",
    "SourceMetadata",
    "TriggerAnalysisRequest",
    "UploadMetadata",
    "ErrorResponse",
    "HealthResponse",
    "QueueStatsResponse",
    "RfpStatusResponse",
    "RubricResponse",
    "TriggerAnalysisResponse",
    "UploadResponse",
]
