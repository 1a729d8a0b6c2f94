"""Pytest configuration and fixtures."""

import os
from pathlib import Path
from typing import Callable

import pytest

# Set test environment variables before importing modules
os.environ["OPENAI_API_KEY"] = "test-api-key"
os.environ["LANGCHAIN_API_KEY"] = "test-langchain-key"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EXTRACTION_SERVICE_URL"] = ""

import httpx  # noqa: E402
import jwt  # noqa: E402

from rfp_intake.config import Settings  # noqa: E402
from rfp_intake.errors import AnalysisTransientFailure  # noqa: E402
from rfp_intake.extraction.service_client import ExtractionServiceClient  # noqa: E402
from rfp_intake.llm.base import SemanticAnalyzer  # noqa: E402
from rfp_intake.models.records import (  # noqa: E402
    AnalysisResult,
    EvaluationCriterion,
    Requirement,
)
from rfp_intake.models.requests import UploadMetadata  # noqa: E402
from rfp_intake.services.container import ServiceContainer  # noqa: E402

TEST_JWT_SECRET = "test-jwt-secret"


class FakeAnalyzer(SemanticAnalyzer):
    """Semantic analyzer that fails a set number of times, then succeeds."""

    def __init__(self, fail_times: int = 0, error: str = "LLM provider timed out"):
        self.fail_times = fail_times
        self.error = error
        self.calls: list[str] = []

    def analyze(self, text, known_requirements=None):
        self.calls.append(text)
        if len(self.calls) <= self.fail_times:
            raise AnalysisTransientFailure(self.error)
        return AnalysisResult(
            requirements=[
                Requirement(
                    id="REQ-1",
                    text="The system shall implement multi-factor authentication.",
                    category="1.1 Security Requirements",
                    type="mandatory",
                    mandatory=True,
                )
            ],
            evaluation_criteria=[
                EvaluationCriterion(
                    criterion="Technical Approach",
                    weight=60,
                    max_points=60,
                    scoring_criteria=["Security architecture"],
                ),
                EvaluationCriterion(criterion="Price", weight=40, max_points=40),
            ],
            summary="Enterprise security system",
            keywords=["security", "MFA"],
            confidence_score=0.8,
        )


@pytest.fixture
def sample_rfp_content() -> str:
    """Sample RFP document content for testing."""
    return """
    REQUEST FOR PROPOSAL
    Project: Enterprise Security System

    Section 1: Technical Requirements

    1.1 Security Requirements
    REQ-001: The system shall implement multi-factor authentication.
    REQ-002: All data must be encrypted at rest using AES-256.
    REQ-003: The system should maintain audit logs for all user actions.

    Section 2: Timeline and Budget

    Proposal due: March 15, 2026
    Questions due: February 20, 2026
    Budget: $400,000 to $500,000

    Section 3: Compliance
    The system must comply with SOC 2 Type II and GDPR.
    """


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temporary database and storage."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'rfp_intake.db'}",
        upload_directory=tmp_path / "incoming",
        storage_directory=tmp_path / "blobs",
        extraction_service_url=None,
        queue_initial_delay_seconds=0,
        queue_backoff_base_seconds=0,
        queue_backoff_max_seconds=0,
        worker_poll_interval_seconds=0.01,
    )


@pytest.fixture
def fake_analyzer() -> FakeAnalyzer:
    return FakeAnalyzer()


@pytest.fixture
def container(settings: Settings, fake_analyzer: FakeAnalyzer):
    """Service container with a fake analyzer and no extraction service."""
    container = ServiceContainer(settings, analyzer=fake_analyzer)
    container.init_schema()
    yield container
    container.close()


@pytest.fixture
def stage_file(container: ServiceContainer, tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Write bytes into the upload directory as if they were just received."""

    def _stage(name: str, content: bytes) -> Path:
        source = tmp_path / "src" / name
        source.parent.mkdir(parents=True, exist_ok=True)
        source.write_bytes(content)
        with open(source, "rb") as f:
            return container.uploads.stage(f, name)

    return _stage


@pytest.fixture
def upload_metadata() -> UploadMetadata:
    return UploadMetadata(client_name="Acme")


def make_tika_client(handler: Callable[[httpx.Request], httpx.Response], retries: int = 1) -> ExtractionServiceClient:
    """Extraction client talking to an in-process fake Tika server."""
    return ExtractionServiceClient(
        "http://tika:9998",
        retries=retries,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


@pytest.fixture
def tika_client():
    """Factory for extraction clients backed by httpx.MockTransport."""
    return make_tika_client


def make_token(organization_id: str = "org-1", user_id: str = "user-1", **claims) -> str:
    return jwt.encode(
        {"sub": user_id, "organizationId": organization_id, **claims},
        TEST_JWT_SECRET,
        algorithm="HS256",
    )


def auth_headers(organization_id: str = "org-1", user_id: str = "user-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(organization_id, user_id)}"}


@pytest.fixture
def headers():
    """Factory for Authorization headers of a given organization."""
    return auth_headers
