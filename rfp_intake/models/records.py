"""RFP record and analysis job models."""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from rfp_intake.models.base import CamelModel
from rfp_intake.utils.clock import utcnow


class RfpStatus(str, Enum):
    """Lifecycle status of an RFP record."""

    UPLOADED = "uploaded"
    PROCESSING = "processing"
    ANALYZED = "analyzed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (RfpStatus.ANALYZED, RfpStatus.ERROR)


class ExtractionMethod(str, Enum):
    """Which extraction path produced the text."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


class SourceMetadata(CamelModel):
    """Facts about the uploaded file."""

    original_file_name: str = Field(..., description="Filename as uploaded")
    file_size: int = Field(..., ge=0, description="Size in bytes")
    mime_type: str | None = Field(default=None)
    storage_ref: str = Field(..., description="Durable blob store reference")
    content_hash: str = Field(..., description="SHA-256 of the file bytes")


class ExtractionMetadata(CamelModel):
    """Outcome of text extraction."""

    method: ExtractionMethod | None = Field(default=None)
    word_count: int = Field(default=0, ge=0)
    character_count: int = Field(default=0, ge=0)
    page_count: int | None = Field(default=None, ge=0)
    duration_ms: float = Field(default=0.0, ge=0.0)
    document_metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Content type, author, language and dates reported by the extractor",
    )
    extracted_at: datetime | None = Field(default=None)
    error: str | None = Field(default=None, description="Failure detail when extraction failed")


class ExtractedText(BaseModel):
    """Normalized text plus extraction facts."""

    text: str
    word_count: int = Field(ge=0)
    character_count: int = Field(ge=0)
    page_count: int | None = Field(default=None, ge=0)
    method: ExtractionMethod
    duration_ms: float = Field(default=0.0, ge=0.0)
    document_metadata: dict[str, Any] = Field(default_factory=dict)

    def to_metadata(self) -> ExtractionMetadata:
        return ExtractionMetadata(
            method=self.method,
            word_count=self.word_count,
            character_count=self.character_count,
            page_count=self.page_count,
            duration_ms=self.duration_ms,
            document_metadata=self.document_metadata,
            extracted_at=utcnow(),
        )


class Requirement(CamelModel):
    """A requirement found in the RFP text."""

    id: str = Field(..., description="Requirement identifier, e.g. REQ-1")
    text: str = Field(..., description="Requirement wording")
    category: str | None = Field(default=None, description="Section or category")
    type: str = Field(default="informational", description="mandatory, optional or informational")
    mandatory: bool = Field(default=False)


class EvaluationCriterion(CamelModel):
    """One category of the generated evaluation rubric."""

    criterion: str
    description: str | None = None
    weight: float = Field(default=0.0, ge=0.0)
    max_points: float = Field(default=0.0, ge=0.0)
    scoring_criteria: list[str] = Field(default_factory=list)


class KeyDate(CamelModel):
    """A deadline or milestone mentioned in the RFP."""

    event: str
    event_date: date


class BudgetRange(CamelModel):
    """Budget range mentioned in the RFP."""

    min: float | None = None
    max: float | None = None
    currency: str = "USD"


class AnalysisResult(CamelModel):
    """Structured output of semantic analysis."""

    requirements: list[Requirement] = Field(default_factory=list)
    evaluation_criteria: list[EvaluationCriterion] = Field(default_factory=list)
    summary: str = Field(default="")
    keywords: list[str] = Field(default_factory=list)
    confidence_score: float = Field(default=0.0, ge=0.0)
    total_points: float = Field(default=100.0, ge=0.0)
    key_dates: list[KeyDate] = Field(default_factory=list)
    budget_range: BudgetRange | None = Field(default=None)
    analysis_completed_at: datetime = Field(default_factory=utcnow)


class RfpRecord(BaseModel):
    """The central RFP entity held by the record store."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    organization_id: str = Field(..., description="Tenant scope")
    uploaded_by_id: str | None = Field(default=None)
    title: str
    client_name: str
    due_date: date | None = None
    description: str | None = None
    content_hash: str
    status: RfpStatus = RfpStatus.UPLOADED
    source_metadata: SourceMetadata
    extracted_text: str | None = None
    extraction_metadata: ExtractionMetadata | None = None
    analysis_result: AnalysisResult | None = None
    error_detail: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None

    @property
    def progress(self) -> int:
        """Coarse progress heuristic derived from status."""
        if self.status == RfpStatus.UPLOADED:
            return 10
        if self.status == RfpStatus.PROCESSING:
            return 50 if self.extracted_text else 30
        if self.status == RfpStatus.ANALYZED:
            return 100
        return 0


class AnalysisJob(BaseModel):
    """A queued request to analyze one RFP."""

    id: str
    rfp_id: str
    priority: int = 0
    attempt: int = Field(default=0, ge=0)
    max_attempts: int = Field(default=3, ge=1)
    visible_after: datetime
    enqueued_at: datetime
    leased_by: str | None = None
    leased_until: datetime | None = None
    last_error: str | None = None

    @property
    def exhausted(self) -> bool:
        """True once every allowed delivery has been used."""
        return self.attempt >= self.max_attempts


class JobHandle(BaseModel):
    """Returned by enqueue."""

    job_id: str
    rfp_id: str
    priority: int
    visible_after: datetime


class NackOutcome(BaseModel):
    """Result of reporting a failed delivery."""

    job_id: str
    attempt: int
    exhausted: bool
    retry_at: datetime | None = None
