"""LangGraph workflow for RFP analysis."""

from typing import Literal

from langgraph.graph import END, StateGraph
from langsmith import traceable

from rfp_intake.errors import AnalysisTransientFailure
from rfp_intake.graph.nodes import GraphNodes
from rfp_intake.graph.state import AnalysisState
from rfp_intake.llm.analyzer import RFPAnalyzer
from rfp_intake.llm.base import SemanticAnalyzer
from rfp_intake.models.records import AnalysisResult, Requirement
from rfp_intake.utils.logging import LoggerMixin


class RFPAnalysisGraph(SemanticAnalyzer, LoggerMixin):
    """LangGraph-based semantic analysis.

    extract_requirements -> generate_rubric -> extract_metadata -> assemble_result,
    with any node failure routed to handle_error.
    """

    def __init__(self, analyzer: RFPAnalyzer | None = None):
        """Initialize the RFP analysis graph.

        Args:
            analyzer: Optional RFP analyzer.
        """
        self._analyzer = analyzer or RFPAnalyzer()
        self._nodes = GraphNodes(analyzer=self._analyzer)
        self._graph = self._build_graph()

        self.log_info("RFP Analysis Graph initialized")

    def _build_graph(self):
        """Build the LangGraph workflow."""
        graph = StateGraph(AnalysisState)

        graph.add_node("extract_requirements", self._nodes.extract_requirements)
        graph.add_node("generate_rubric", self._nodes.generate_rubric)
        graph.add_node("extract_metadata", self._nodes.extract_metadata)
        graph.add_node("assemble_result", self._nodes.assemble_result)
        graph.add_node("handle_error", self._nodes.handle_error)

        graph.set_conditional_entry_point(
            self._route_start,
            {
                "requirements": "extract_requirements",
                "rubric": "generate_rubric",
            },
        )

        graph.add_conditional_edges(
            "extract_requirements",
            self._route_on_error("rubric"),
            {
                "rubric": "generate_rubric",
                "error": "handle_error",
            },
        )

        graph.add_conditional_edges(
            "generate_rubric",
            self._route_on_error("metadata"),
            {
                "metadata": "extract_metadata",
                "error": "handle_error",
            },
        )

        graph.add_edge("extract_metadata", "assemble_result")
        graph.add_edge("assemble_result", END)
        graph.add_edge("handle_error", END)

        return graph.compile()

    def _route_start(self, state: AnalysisState) -> Literal["requirements", "rubric"]:
        """Skip extraction when requirements are already known."""
        if state.known_requirements is not None:
            return "rubric"
        return "requirements"

    @staticmethod
    def _route_on_error(next_step: str):
        def route(state: AnalysisState) -> str:
            if state.error:
                return "error"
            return next_step

        return route

    @traceable(name="run_analysis")
    def analyze(
        self,
        text: str,
        known_requirements: list[Requirement] | None = None,
    ) -> AnalysisResult:
        """Run the analysis workflow.

        Raises:
            AnalysisTransientFailure: A workflow step failed.
        """
        self.log_info("Starting analysis workflow", characters=len(text))

        initial_state = AnalysisState(text=text, known_requirements=known_requirements)
        final_state = self._graph.invoke(initial_state)

        if isinstance(final_state, dict):
            result = final_state.get("result")
            error = final_state.get("error")
        else:
            result = final_state.result
            error = final_state.error

        if error or result is None:
            raise AnalysisTransientFailure(error or "Analysis produced no result")

        self.log_info(
            "Analysis workflow complete",
            requirements_count=len(result.requirements),
            criteria_count=len(result.evaluation_criteria),
        )
        return result
