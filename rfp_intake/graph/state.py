"""Graph state definitions for LangGraph workflow."""

from pydantic import BaseModel, Field

from rfp_intake.models.records import (
    AnalysisResult,
    BudgetRange,
    EvaluationCriterion,
    KeyDate,
    Requirement,
)


class AnalysisState(BaseModel):
    """State object for the RFP analysis graph.

    This state is passed between nodes in the LangGraph workflow.
    """

    # Input
    text: str = Field(default="", description="Normalized RFP text")
    known_requirements: list[Requirement] | None = Field(
        default=None,
        description="Requirements supplied by the caller; skips extraction",
    )

    # Requirement extraction
    requirements: list[Requirement] = Field(default_factory=list)
    summary: str = Field(default="")
    keywords: list[str] = Field(default_factory=list)

    # Rubric generation
    evaluation_criteria: list[EvaluationCriterion] = Field(default_factory=list)
    total_points: float = Field(default=100.0)
    confidence_score: float = Field(default=0.0)

    # Pattern-based metadata
    key_dates: list[KeyDate] = Field(default_factory=list)
    budget_range: BudgetRange | None = Field(default=None)

    # Output
    result: AnalysisResult | None = Field(default=None)

    # Workflow control
    error: str | None = Field(default=None, description="Error message if any")
    current_step: str = Field(default="start", description="Current step in the workflow")
