"""RFP Analyzer using LLM for analysis."""

import json

from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI
from langsmith import traceable

from rfp_intake.config import Settings, get_settings
from rfp_intake.errors import AnalysisTransientFailure, OutputParsingError
from rfp_intake.llm.output_parser import StructuredOutputParser
from rfp_intake.llm.prompts import PromptTemplates
from rfp_intake.models.records import EvaluationCriterion, Requirement
from rfp_intake.utils.logging import LoggerMixin


class RFPAnalyzer(LoggerMixin):
    """LLM calls for requirement extraction and rubric generation."""

    def __init__(
        self,
        settings: Settings | None = None,
        requirements_llm: BaseChatModel | None = None,
        rubric_llm: BaseChatModel | None = None,
    ):
        """Initialize RFP analyzer.

        Args:
            settings: Application settings.
            requirements_llm: Chat model for requirement extraction.
            rubric_llm: Chat model for rubric generation.
        """
        settings = settings or get_settings()
        self.max_chars = settings.analysis_max_chars

        self._requirements_llm = requirements_llm or self._build_llm(
            settings, settings.requirements_temperature
        )
        self._rubric_llm = rubric_llm or self._build_llm(settings, settings.rubric_temperature)
        self._parser = StructuredOutputParser()

        self.log_info("RFP Analyzer initialized", model=settings.openai_model)

    @staticmethod
    def _build_llm(settings: Settings, temperature: float) -> ChatOpenAI:
        return ChatOpenAI(
            model=settings.openai_model,
            temperature=temperature,
            max_tokens=settings.max_tokens,
            openai_api_key=settings.openai_api_key.get_secret_value(),
            model_kwargs={"response_format": {"type": "json_object"}},
        )

    def _truncate(self, text: str) -> str:
        if len(text) <= self.max_chars:
            return text
        self.log_warning("Truncating RFP text for analysis", characters=len(text), limit=self.max_chars)
        return text[: self.max_chars]

    def _invoke(self, llm: BaseChatModel, prompt, operation: str, **variables) -> str:
        messages = prompt.format_messages(**variables)
        try:
            response = llm.invoke(messages)
        except Exception as e:
            self.log_error("LLM call failed", operation=operation, error=str(e))
            raise AnalysisTransientFailure(f"Failed to {operation}: {e}", operation=operation) from e
        return response.content if isinstance(response.content, str) else str(response.content)

    @traceable(name="extract_requirements")
    def extract_requirements(self, text: str) -> tuple[list[Requirement], str, list[str]]:
        """Extract requirements, a summary and keywords from RFP text.

        Raises:
            AnalysisTransientFailure: LLM call failed or returned unusable output.
        """
        self.log_info("Extracting requirements", characters=len(text))

        output = self._invoke(
            self._requirements_llm,
            PromptTemplates.requirements_prompt(),
            "analyze RFP",
            content=self._truncate(text),
        )
        requirements, summary, keywords = self._parser.parse_requirements(output)

        self.log_info(
            "Requirements extracted",
            requirements_found=len(requirements),
            mandatory=sum(1 for r in requirements if r.mandatory),
        )
        return requirements, summary, keywords

    @traceable(name="generate_rubric")
    def generate_rubric(
        self,
        text: str,
        requirements: list[Requirement],
    ) -> tuple[list[EvaluationCriterion], float, float]:
        """Generate an evaluation rubric from RFP text and its requirements.

        Raises:
            AnalysisTransientFailure: LLM call failed or returned unusable output.
        """
        self.log_info("Generating evaluation rubric", requirements_count=len(requirements))

        requirements_json = json.dumps(
            [{"text": r.text, "type": r.type, "section": r.category} for r in requirements]
        )
        output = self._invoke(
            self._rubric_llm,
            PromptTemplates.rubric_prompt(),
            "generate evaluation rubric",
            content=self._truncate(text),
            requirements=requirements_json,
        )
        criteria, total_points, confidence = self._parser.parse_rubric(output)
        if not criteria:
            raise OutputParsingError("Rubric contained no evaluation categories")

        self.log_info("Rubric generated", categories=len(criteria), confidence=confidence)
        return criteria, total_points, confidence
