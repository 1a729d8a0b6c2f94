"""Structured output parser for LLM responses."""

import json
import re
from typing import Any

from pydantic import ValidationError

from rfp_intake.errors import OutputParsingError
from rfp_intake.models.records import EvaluationCriterion, Requirement
from rfp_intake.utils.logging import LoggerMixin

REQUIREMENT_TYPES = {"mandatory", "optional", "informational"}


class StructuredOutputParser(LoggerMixin):
    """Parser for structured JSON output from LLM."""

    def parse_requirements(self, llm_output: str) -> tuple[list[Requirement], str, list[str]]:
        """Parse requirement extraction output.

        Returns:
            Requirements, summary and keywords.

        Raises:
            OutputParsingError: Output holds no usable JSON object.
        """
        json_data = self._extract_json(llm_output)
        requirements = self._parse_requirements(json_data.get("requirements", []))
        summary = str(json_data.get("summary") or "")
        keywords = [str(k) for k in json_data.get("keywords", []) if k]
        return requirements, summary, keywords

    def parse_rubric(self, llm_output: str) -> tuple[list[EvaluationCriterion], float, float]:
        """Parse rubric generation output.

        Returns:
            Evaluation criteria, total points and confidence score (0-1).

        Raises:
            OutputParsingError: Output holds no usable JSON object.
        """
        json_data = self._extract_json(llm_output)
        criteria = self._parse_criteria(json_data.get("categories", []))

        total_points = self._to_float(json_data.get("totalPoints"))
        if total_points is None:
            total_points = sum(c.max_points for c in criteria) or 100.0

        return criteria, total_points, self._normalize_confidence(json_data.get("confidenceScore"))

    def _extract_json(self, text: str) -> dict[str, Any]:
        """Extract JSON from text that may contain other content."""
        if not text or not text.strip():
            raise OutputParsingError("LLM returned an empty response")

        # Try direct JSON parse first
        try:
            data = json.loads(text)
            if isinstance(data, dict):
                return data
        except json.JSONDecodeError:
            pass

        # Try to find JSON block in markdown code blocks
        json_patterns = [
            r"```json\s*([\s\S]*?)\s*```",
            r"```\s*([\s\S]*?)\s*```",
            r"\{[\s\S]*\}",
        ]

        for pattern in json_patterns:
            for match in re.findall(pattern, text):
                cleaned = match.strip()
                if not cleaned.startswith("{"):
                    continue
                try:
                    return json.loads(cleaned)
                except json.JSONDecodeError:
                    continue

        return self._fix_and_parse_json(text)

    def _fix_and_parse_json(self, text: str) -> dict[str, Any]:
        """Attempt to fix common JSON formatting issues."""
        start = text.find("{")
        end = text.rfind("}")

        if start == -1 or end == -1:
            raise OutputParsingError("No JSON object found in LLM output", preview=text[:200])

        json_str = text[start : end + 1]

        fixes = [
            (r",\s*}", "}"),  # Remove trailing commas
            (r",\s*]", "]"),  # Remove trailing commas in arrays
        ]

        for pattern, replacement in fixes:
            json_str = re.sub(pattern, replacement, json_str)

        try:
            return json.loads(json_str)
        except json.JSONDecodeError as e:
            self.log_warning("JSON fix failed", error=str(e))
            raise OutputParsingError(f"Invalid JSON in LLM output: {e}", preview=text[:200]) from e

    def _parse_requirements(self, requirements_data: list[Any]) -> list[Requirement]:
        """Parse requirement data into Requirement objects.

        Handles both dict format and string format from LLM.
        """
        requirements = []

        for req_data in requirements_data:
            # LLM sometimes returns just strings
            if isinstance(req_data, str):
                req_data = {"text": req_data}
            if not isinstance(req_data, dict) or not req_data.get("text"):
                continue

            req_type = str(req_data.get("type") or "informational").lower().strip()
            if req_type not in REQUIREMENT_TYPES:
                req_type = "informational"

            try:
                requirements.append(
                    Requirement(
                        id=f"REQ-{len(requirements) + 1}",
                        text=str(req_data["text"]).strip(),
                        category=req_data.get("section") or req_data.get("category"),
                        type=req_type,
                        mandatory=req_type == "mandatory",
                    )
                )
            except ValidationError as e:
                self.log_warning("Failed to parse requirement", error=str(e))

        return requirements

    def _parse_criteria(self, categories: list[Any]) -> list[EvaluationCriterion]:
        criteria = []
        for category in categories:
            if not isinstance(category, dict):
                continue
            name = category.get("name") or category.get("criterion")
            if not name:
                continue
            try:
                criteria.append(
                    EvaluationCriterion(
                        criterion=str(name),
                        description=category.get("description"),
                        weight=self._to_float(category.get("weight")) or 0.0,
                        max_points=self._to_float(category.get("maxPoints")) or 0.0,
                        scoring_criteria=[str(c) for c in category.get("criteria", []) if c],
                    )
                )
            except ValidationError as e:
                self.log_warning("Failed to parse rubric category", name=name, error=str(e))
        return criteria

    @staticmethod
    def _to_float(value: Any) -> float | None:
        try:
            return float(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    def _normalize_confidence(self, value: Any) -> float:
        """Clamp to 0-1; percentages are scaled down."""
        confidence = self._to_float(value)
        if confidence is None or confidence < 0:
            return 0.0
        if confidence > 1:
            confidence = confidence / 100
        return min(confidence, 1.0)
