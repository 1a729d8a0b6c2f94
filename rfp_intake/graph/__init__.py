"""LangGraph workflow modules."""

from rfp_intake.graph.nodes import GraphNodes
from rfp_intake.graph.state import AnalysisState
from rfp_intake.graph.workflow import RFPAnalysisGraph

__all__ = ["RFPAnalysisGraph", "AnalysisState", "GraphNodes"]
