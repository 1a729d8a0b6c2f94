"""LLM integration modules."""

from rfp_intake.llm.analyzer import RFPAnalyzer
from rfp_intake.llm.base import SemanticAnalyzer
from rfp_intake.llm.output_parser import StructuredOutputParser
from rfp_intake.llm.prompts import PromptTemplates

__all__ = ["RFPAnalyzer", "PromptTemplates", "SemanticAnalyzer", "StructuredOutputParser"]
