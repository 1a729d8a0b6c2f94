"""Request models for RFP Intake."""

from datetime import date

from pydantic import Field, field_validator

from rfp_intake.models.base import CamelModel


class UploadMetadata(CamelModel):
    """Descriptive fields sent alongside an uploaded RFP document."""

    title: str | None = Field(default=None, max_length=500, description="Defaults to the filename")
    client_name: str = Field(..., min_length=1, max_length=255, description="Issuing client")
    due_date: date | None = Field(default=None, description="Proposal due date")
    description: str | None = Field(default=None, max_length=10_000)

    @field_validator("client_name")
    @classmethod
    def _strip_client_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("clientName is required")
        return value

    @field_validator("title", "description")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Enterprise Security System",
                    "clientName": "Acme",
                    "dueDate": "2026-12-01",
                    "description": "Managed SOC services",
                }
            ]
        }
    }


class TriggerAnalysisRequest(CamelModel):
    """Manual request to (re-)run analysis for an RFP."""

    priority: int = Field(default=1, ge=-100, le=100, description="Higher runs first")
    reanalyze: bool = Field(
        default=False,
        description="Re-run analysis even if the RFP is already analyzed",
    )
