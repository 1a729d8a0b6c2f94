"""Tests for LLM output parser."""

import json

import pytest

from rfp_intake.errors import OutputParsingError
from rfp_intake.llm.output_parser import StructuredOutputParser


class TestParseRequirements:
    """Tests for requirement extraction output."""

    def test_parse_valid_json(self):
        """Test parsing valid JSON output."""
        parser = StructuredOutputParser()

        output = json.dumps({
            "requirements": [
                {
                    "text": "The system shall implement multi-factor authentication.",
                    "type": "mandatory",
                    "section": "1.1 Security Requirements",
                }
            ],
            "summary": "Enterprise security system",
            "keywords": ["security", "MFA"],
        })

        requirements, summary, keywords = parser.parse_requirements(output)

        assert len(requirements) == 1
        assert requirements[0].id == "REQ-1"
        assert requirements[0].mandatory is True
        assert requirements[0].category == "1.1 Security Requirements"
        assert summary == "Enterprise security system"
        assert keywords == ["security", "MFA"]

    def test_parse_json_in_markdown(self):
        """Test parsing JSON wrapped in markdown code blocks."""
        parser = StructuredOutputParser()

        output = """Here is the analysis:

```json
{
    "requirements": [],
    "summary": "No requirements found",
    "keywords": []
}
```

That's the result."""

        requirements, summary, _ = parser.parse_requirements(output)

        assert requirements == []
        assert summary == "No requirements found"

    def test_parse_malformed_json(self):
        """Test handling of malformed JSON."""
        parser = StructuredOutputParser()

        with pytest.raises(OutputParsingError):
            parser.parse_requirements("This is not valid JSON at all")

    def test_parse_empty_output(self):
        parser = StructuredOutputParser()

        with pytest.raises(OutputParsingError, match="empty"):
            parser.parse_requirements("   ")

    def test_parse_json_with_trailing_comma(self):
        """Test parsing JSON with trailing commas."""
        parser = StructuredOutputParser()

        output = """{
            "requirements": ["Vendor must be ISO 27001 certified",],
            "summary": "Test",
        }"""

        requirements, summary, _ = parser.parse_requirements(output)

        assert summary == "Test"
        assert len(requirements) == 1

    def test_unknown_type_is_informational(self):
        """Test requirement type normalization."""
        parser = StructuredOutputParser()

        output = json.dumps({
            "requirements": [
                {"text": "Provide references", "type": "CRITICAL"},
                {"text": "Hosting in EU preferred", "type": " Optional "},
            ]
        })

        requirements, _, _ = parser.parse_requirements(output)

        assert requirements[0].type == "informational"
        assert requirements[0].mandatory is False
        assert requirements[1].type == "optional"

    def test_string_requirements_and_ids(self):
        """Test plain string requirements get sequential IDs."""
        parser = StructuredOutputParser()

        output = json.dumps({"requirements": ["First", {"type": "mandatory"}, "Second"]})

        requirements, summary, keywords = parser.parse_requirements(output)

        assert [r.id for r in requirements] == ["REQ-1", "REQ-2"]
        assert [r.text for r in requirements] == ["First", "Second"]
        assert summary == ""
        assert keywords == []


class TestParseRubric:
    """Tests for rubric generation output."""

    def test_parse_rubric(self):
        parser = StructuredOutputParser()

        output = json.dumps({
            "categories": [
                {
                    "name": "Technical Approach",
                    "description": "Quality of the solution",
                    "weight": 60,
                    "maxPoints": 60,
                    "criteria": ["Architecture", "Security"],
                },
                {"name": "Price", "weight": 40, "maxPoints": 40},
            ],
            "totalPoints": 100,
            "confidenceScore": 0.85,
        })

        criteria, total_points, confidence = parser.parse_rubric(output)

        assert [c.criterion for c in criteria] == ["Technical Approach", "Price"]
        assert criteria[0].scoring_criteria == ["Architecture", "Security"]
        assert total_points == 100
        assert confidence == 0.85

    def test_total_points_from_categories(self):
        parser = StructuredOutputParser()

        output = json.dumps({"categories": [{"name": "A", "maxPoints": 30}, {"name": "B", "maxPoints": 20}]})

        _, total_points, confidence = parser.parse_rubric(output)

        assert total_points == 50
        assert confidence == 0.0

    @pytest.mark.parametrize("raw,expected", [(85, 0.85), (0.4, 0.4), (-3, 0.0), ("n/a", 0.0), (250, 1.0)])
    def test_confidence_normalized(self, raw, expected):
        parser = StructuredOutputParser()

        _, _, confidence = parser.parse_rubric(json.dumps({"categories": [], "confidenceScore": raw}))

        assert confidence == pytest.approx(expected)

    def test_categories_without_name_skipped(self):
        parser = StructuredOutputParser()

        criteria, _, _ = parser.parse_rubric(json.dumps({"categories": [{"weight": 10}, "Price", {"criterion": "Fit"}]}))

        assert [c.criterion for c in criteria] == ["Fit"]
