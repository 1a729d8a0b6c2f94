"""Graph nodes for RFP analysis workflow."""

from typing import Any

from langsmith import traceable

from rfp_intake.graph.state import AnalysisState
from rfp_intake.llm.analyzer import RFPAnalyzer
from rfp_intake.llm.metadata import extract_budget_range, extract_key_dates
from rfp_intake.models.records import AnalysisResult
from rfp_intake.utils.logging import LoggerMixin


class GraphNodes(LoggerMixin):
    """Collection of nodes for the RFP analysis graph."""

    def __init__(self, analyzer: RFPAnalyzer):
        """Initialize graph nodes.

        Args:
            analyzer: RFP analyzer instance.
        """
        self._analyzer = analyzer

    @traceable(name="extract_requirements_node")
    def extract_requirements(self, state: AnalysisState) -> dict[str, Any]:
        """Extract requirements, summary and keywords with the LLM."""
        try:
            requirements, summary, keywords = self._analyzer.extract_requirements(state.text)
            return {
                "requirements": requirements,
                "summary": summary,
                "keywords": keywords,
                "current_step": "requirements_extracted",
            }

        except Exception as e:
            self.log_error("Requirement extraction failed", error=str(e))
            return {"error": str(e), "current_step": "error"}

    @traceable(name="generate_rubric_node")
    def generate_rubric(self, state: AnalysisState) -> dict[str, Any]:
        """Generate the evaluation rubric from the text and requirements."""
        requirements = state.known_requirements if state.known_requirements is not None else state.requirements
        try:
            criteria, total_points, confidence = self._analyzer.generate_rubric(state.text, requirements)
            return {
                "requirements": requirements,
                "evaluation_criteria": criteria,
                "total_points": total_points,
                "confidence_score": confidence,
                "current_step": "rubric_generated",
            }

        except Exception as e:
            self.log_error("Rubric generation failed", error=str(e))
            return {"error": str(e), "current_step": "error"}

    def extract_metadata(self, state: AnalysisState) -> dict[str, Any]:
        """Pull key dates and budget range out of the text."""
        return {
            "key_dates": extract_key_dates(state.text),
            "budget_range": extract_budget_range(state.text),
            "current_step": "metadata_extracted",
        }

    def assemble_result(self, state: AnalysisState) -> dict[str, Any]:
        """Combine node outputs into the analysis result."""
        result = AnalysisResult(
            requirements=state.requirements,
            evaluation_criteria=state.evaluation_criteria,
            summary=state.summary,
            keywords=state.keywords,
            confidence_score=state.confidence_score,
            total_points=state.total_points,
            key_dates=state.key_dates,
            budget_range=state.budget_range,
        )
        return {"result": result, "current_step": "complete"}

    def handle_error(self, state: AnalysisState) -> dict[str, Any]:
        """Handle errors in the workflow."""
        self.log_warning("Analysis workflow stopped", error=state.error, step=state.current_step)
        return {"result": None, "current_step": "error_handled"}
