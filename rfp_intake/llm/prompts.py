"""Prompt templates for RFP analysis."""

from langchain_core.prompts import ChatPromptTemplate


class PromptTemplates:
    """Collection of prompt templates for RFP analysis."""

    REQUIREMENTS_SYSTEM_PROMPT = """You are an expert RFP (Request for Proposal) analyst. Extract and categorize all requirements from the RFP.

For each requirement, determine if it is:
- mandatory (must/shall/required)
- optional (should/may/preferred)
- informational (background/context)

Always base your analysis on the provided document text. Do not invent requirements.

Return a JSON object with:
{{
    "requirements": [{{"text": "...", "type": "mandatory|optional|informational", "section": "..."}}],
    "summary": "Brief RFP summary",
    "keywords": ["key", "terms"]
}}"""

    REQUIREMENTS_TEMPLATE = """Analyze this RFP content:

{content}"""

    RUBRIC_SYSTEM_PROMPT = """You are an expert at creating RFP evaluation rubrics.
Based on the RFP content and requirements, generate a scoring rubric that evaluators would likely use.

Consider typical evaluation categories like:
- Technical approach and understanding
- Past performance and experience
- Management approach
- Price/cost
- Innovation

Return a JSON object with evaluation categories, weights, and scoring criteria:
{{
    "categories": [
        {{
            "name": "Technical Approach",
            "description": "What evaluators look for",
            "weight": 40,
            "maxPoints": 40,
            "criteria": ["Specific scoring criterion"]
        }}
    ],
    "totalPoints": 100,
    "confidenceScore": 0.8
}}

confidenceScore is your confidence in the rubric, between 0 and 1."""

    RUBRIC_TEMPLATE = """Create an evaluation rubric for this RFP:

{content}

Requirements:
{requirements}"""

    @classmethod
    def requirements_prompt(cls) -> ChatPromptTemplate:
        """Prompt for requirement extraction, summary and keywords."""
        return ChatPromptTemplate.from_messages([
            ("system", cls.REQUIREMENTS_SYSTEM_PROMPT),
            ("human", cls.REQUIREMENTS_TEMPLATE),
        ])

    @classmethod
    def rubric_prompt(cls) -> ChatPromptTemplate:
        """Prompt for evaluation rubric generation."""
        return ChatPromptTemplate.from_messages([
            ("system", cls.RUBRIC_SYSTEM_PROMPT),
            ("human", cls.RUBRIC_TEMPLATE),
        ])
