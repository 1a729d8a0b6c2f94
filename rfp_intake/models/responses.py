"""Response models for RFP Intake."""

from datetime import datetime
from typing import Any

from pydantic import Field

from rfp_intake.models.base import CamelModel
from rfp_intake.models.records import (
    AnalysisResult,
    EvaluationCriterion,
    ExtractionMetadata,
    RfpRecord,
    RfpStatus,
)
from rfp_intake.utils.clock import utcnow


class HealthResponse(CamelModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    extraction_service: str | None = None


class ErrorResponse(CamelModel):
    """Body returned for handled errors."""

    error: str
    message: str
    details: dict[str, Any] | None = None


class UploadResponse(CamelModel):
    """Result of an upload, including duplicate short-circuits."""

    rfp_id: str
    original_file_name: str
    file_size: int = Field(..., ge=0)
    content_hash: str
    status: RfpStatus
    message: str
    duplicate: bool = False


class RfpStatusResponse(CamelModel):
    """Status of an RFP record, with results when available."""

    rfp_id: str
    title: str
    client_name: str
    status: RfpStatus
    progress: int = Field(..., ge=0, le=100)
    uploaded_at: datetime
    analysis_result: AnalysisResult | None = None
    error_detail: str | None = None
    extraction_metadata: ExtractionMetadata | None = None

    @classmethod
    def from_record(cls, record: RfpRecord, include_extraction: bool = False) -> "RfpStatusResponse":
        return cls(
            rfp_id=record.id,
            title=record.title,
            client_name=record.client_name,
            status=record.status,
            progress=record.progress,
            uploaded_at=record.created_at,
            analysis_result=record.analysis_result if record.status == RfpStatus.ANALYZED else None,
            error_detail=record.error_detail,
            extraction_metadata=record.extraction_metadata if include_extraction else None,
        )


class TriggerAnalysisResponse(CamelModel):
    """Outcome of a manual analysis trigger."""

    rfp_id: str
    status: RfpStatus
    queued: bool
    job_id: str | None = None
    message: str
    analysis_result: AnalysisResult | None = None


class RubricResponse(CamelModel):
    """Evaluation rubric of an analyzed RFP."""

    rfp_id: str
    title: str
    evaluation_criteria: list[EvaluationCriterion] = Field(default_factory=list)
    total_points: float = 100.0
    confidence_score: float = 0.0
    generated_at: datetime | None = None


class QueueStatsResponse(CamelModel):
    """Analysis queue counters."""

    queue: str = "rfp-analysis"
    waiting: int = 0
    delayed: int = 0
    active: int = 0
    stalled: int = 0
    timestamp: datetime = Field(default_factory=utcnow)
