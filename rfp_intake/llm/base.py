"""Semantic analysis contract."""

from abc import ABC, abstractmethod

from rfp_intake.models.records import AnalysisResult, Requirement


class SemanticAnalyzer(ABC):
    """Turns RFP text into requirements and an evaluation rubric."""

    @abstractmethod
    def analyze(
        self,
        text: str,
        known_requirements: list[Requirement] | None = None,
    ) -> AnalysisResult:
        """Analyze extracted RFP text.

        Raises:
            AnalysisTransientFailure: The analysis could not be completed;
                the caller may retry.
        """
        pass
