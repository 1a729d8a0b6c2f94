"""Tests for API endpoints."""

import httpx
import pytest
from fastapi.testclient import TestClient

from rfp_intake.api.app import create_app
from rfp_intake.services.container import ServiceContainer, get_container


@pytest.fixture
def client(container):
    """Create test client bound to the test container."""
    app = create_app()
    app.dependency_overrides[get_container] = lambda: container
    with TestClient(app) as client:
        yield client


@pytest.fixture
def upload(client, headers):
    """POST a document to the upload endpoint."""

    def _upload(
        content: bytes = b"Budget: $10,000",
        filename: str = "rfp.txt",
        organization_id: str = "org-1",
        content_type: str = "text/plain",
        **form,
    ):
        data = {"clientName": "Acme", **form}
        return client.post(
            "/api/v1/rfps/upload",
            files={"rfpDocument": (filename, content, content_type)},
            data=data,
            headers=headers(organization_id),
        )

    return _upload


def run_workers(container):
    while container.workers.run_once("api-test-worker"):
        pass


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        """Test health check returns healthy status."""
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert data["extractionService"] == "not_configured"

    def test_health_reports_extraction_service(self, settings, fake_analyzer, tika_client):
        container = ServiceContainer(
            settings,
            analyzer=fake_analyzer,
            extraction_client=tika_client(lambda request: httpx.Response(503)),
        )
        app = create_app()
        app.dependency_overrides[get_container] = lambda: container

        with TestClient(app) as client:
            response = client.get("/api/v1/health")
        container.close()

        assert response.status_code == 200
        assert response.json()["extractionService"] == "unavailable"


class TestRootEndpoint:
    """Tests for root endpoint."""

    def test_root(self, client):
        """Test root endpoint returns API info."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "RFP Intake API"
        assert "docs" in data


class TestAuthentication:
    """Tests for bearer token handling."""

    def test_missing_token(self, client):
        response = client.get("/api/v1/rfps/some-id/status")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"] == "authentication_failed"

    def test_invalid_token(self, client):
        response = client.get("/api/v1/rfps/some-id/status", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401


class TestUploadEndpoint:
    """Tests for the upload endpoint."""

    def test_upload_new(self, upload):
        """Test a new upload is stored and queued."""
        response = upload(title="Enterprise Security System", dueDate="2026-12-01")

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "processing"
        assert data["originalFileName"] == "rfp.txt"
        assert data["fileSize"] == len(b"Budget: $10,000")
        assert data["duplicate"] is False
        assert data["message"] == "RFP uploaded successfully and queued for analysis"

    def test_upload_duplicate(self, upload):
        """Test the same bytes in the same organization return the existing RFP."""
        first = upload().json()

        response = upload(filename="renamed.txt")

        assert response.status_code == 200
        data = response.json()
        assert data["rfpId"] == first["rfpId"]
        assert data["duplicate"] is True
        assert data["message"] == "This RFP has already been uploaded"

    def test_upload_other_organization(self, upload):
        first = upload(organization_id="org-1").json()

        response = upload(organization_id="org-2")

        assert response.status_code == 201
        assert response.json()["rfpId"] != first["rfpId"]

    def test_missing_client_name(self, upload):
        response = upload(clientName="")

        assert response.status_code == 400

    def test_invalid_due_date(self, upload):
        response = upload(dueDate="not-a-date")

        assert response.status_code == 400

    def test_unsupported_type(self, upload):
        response = upload(filename="rfp.exe")

        assert response.status_code == 415
        assert "Invalid file type" in response.json()["message"]

    def test_disallowed_mime_type(self, upload, container):
        response = upload(content_type="image/png")

        assert response.status_code == 415
        body = response.json()
        assert body["error"] == "unsupported_format"
        assert body["message"] == "MIME type image/png is not allowed"
        assert list(container.settings.storage_directory.iterdir()) == []

    def test_too_large(self, upload, container):
        container.uploads.max_file_size_bytes = 5

        response = upload()

        assert response.status_code == 413

    def test_extraction_failed(self, upload):
        response = upload(content=b"PK\x03\x04", filename="rfp.docx")

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "extraction_failed"
        assert body["details"]["rfp_id"]


class TestStatusEndpoints:
    """Tests for status, analysis and rubric retrieval."""

    def test_status_lifecycle(self, client, upload, headers, container):
        rfp_id = upload().json()["rfpId"]

        status = client.get(f"/api/v1/rfps/{rfp_id}/status", headers=headers())
        assert status.status_code == 200
        assert status.json()["status"] == "processing"
        assert "analysisResult" not in status.json()

        run_workers(container)

        status = client.get(f"/api/v1/rfps/{rfp_id}/status", headers=headers())
        data = status.json()
        assert data["status"] == "analyzed"
        assert data["progress"] == 100
        assert data["analysisResult"]["requirements"][0]["id"] == "REQ-1"

    def test_analysis_includes_extraction(self, client, upload, headers, container):
        rfp_id = upload().json()["rfpId"]
        run_workers(container)

        data = client.get(f"/api/v1/rfps/{rfp_id}/analysis", headers=headers()).json()

        assert data["extractionMetadata"]["wordCount"] == 2
        assert data["extractionMetadata"]["method"] == "fallback"

    def test_rubric_not_ready(self, client, upload, headers):
        rfp_id = upload().json()["rfpId"]

        response = client.get(f"/api/v1/rfps/{rfp_id}/rubric", headers=headers())

        assert response.status_code == 409
        assert response.json()["message"] == "RFP analysis not completed"

    def test_rubric(self, client, upload, headers, container):
        rfp_id = upload().json()["rfpId"]
        run_workers(container)

        response = client.get(f"/api/v1/rfps/{rfp_id}/rubric", headers=headers())

        assert response.status_code == 200
        data = response.json()
        assert len(data["evaluationCriteria"]) == 2
        assert data["confidenceScore"] == 0.8

    def test_not_found(self, client, headers):
        response = client.get("/api/v1/rfps/missing/status", headers=headers())

        assert response.status_code == 404

    def test_other_organization_denied(self, client, upload, headers):
        rfp_id = upload(organization_id="org-1").json()["rfpId"]

        response = client.get(f"/api/v1/rfps/{rfp_id}/status", headers=headers("org-2"))

        assert response.status_code == 403


class TestTriggerAnalysisEndpoint:
    """Tests for manual analysis triggers."""

    def test_in_progress(self, client, upload, headers):
        rfp_id = upload().json()["rfpId"]

        response = client.post(f"/api/v1/rfps/{rfp_id}/analyze", headers=headers())

        assert response.status_code == 409
        assert response.json()["error"] == "analysis_in_progress"

    def test_already_analyzed(self, client, upload, headers, container):
        rfp_id = upload().json()["rfpId"]
        run_workers(container)

        response = client.post(f"/api/v1/rfps/{rfp_id}/analyze", headers=headers())

        assert response.status_code == 200
        assert response.json()["queued"] is False

    def test_reanalyze(self, client, upload, headers, container):
        rfp_id = upload().json()["rfpId"]
        run_workers(container)

        response = client.post(
            f"/api/v1/rfps/{rfp_id}/analyze",
            json={"priority": 5, "reanalyze": True},
            headers=headers(),
        )

        assert response.status_code == 202
        data = response.json()
        assert data["queued"] is True
        assert data["status"] == "processing"
        assert container.queue.jobs_for(rfp_id)[0].priority == 5


class TestDeleteAndQueueStats:
    """Tests for deletion and queue counters."""

    def test_delete(self, client, upload, headers):
        rfp_id = upload().json()["rfpId"]

        assert client.delete(f"/api/v1/rfps/{rfp_id}", headers=headers()).status_code == 204
        assert client.get(f"/api/v1/rfps/{rfp_id}/status", headers=headers()).status_code == 404
        assert upload().status_code == 201

    def test_queue_stats(self, client, upload, headers):
        upload()

        response = client.get("/api/v1/rfps/queue/stats", headers=headers())

        assert response.status_code == 200
        data = response.json()
        assert data["queue"] == "rfp-analysis"
        assert data["waiting"] == 1
