"""Tests for the analysis worker pool."""

import time

import pytest

from rfp_intake.models.records import RfpStatus
from rfp_intake.workers import AnalysisWorkerPool


@pytest.fixture
def processing_rfp(container, stage_file, upload_metadata):
    """An uploaded RFP in processing with one queued job."""
    response = container.uploads.ingest(
        stage_file("rfp.txt", b"The system shall implement multi-factor authentication."),
        "rfp.txt",
        upload_metadata,
        "org-1",
    )
    return response.rfp_id


def drain(pool: AnalysisWorkerPool, limit: int = 20) -> int:
    handled = 0
    while handled < limit and pool.run_once("test-worker"):
        handled += 1
    return handled


class TestRunOnce:
    """Tests for single job processing."""

    def test_success(self, container, fake_analyzer, processing_rfp):
        assert drain(container.workers) == 1

        record = container.store.get_rfp_by_id(processing_rfp)
        assert record.status == RfpStatus.ANALYZED
        assert record.analysis_result.requirements[0].id == "REQ-1"
        assert record.error_detail is None
        assert fake_analyzer.calls == ["The system shall implement multi-factor authentication."]
        assert container.queue.jobs_for(processing_rfp) == []
        assert container.workers.stats()["processed"] == 1

    def test_empty_queue(self, container):
        assert container.workers.run_once("test-worker") is False

    def test_transient_failures_then_success(self, container, fake_analyzer, processing_rfp):
        fake_analyzer.fail_times = 2

        assert drain(container.workers) == 3

        record = container.store.get_rfp_by_id(processing_rfp)
        assert record.status == RfpStatus.ANALYZED
        assert len(fake_analyzer.calls) == 3
        assert container.queue.jobs_for(processing_rfp) == []
        stats = container.workers.stats()
        assert stats["retried"] == 2
        assert stats["processed"] == 1

    def test_retries_exhausted(self, container, fake_analyzer, processing_rfp):
        fake_analyzer.fail_times = 10

        assert drain(container.workers) == 3

        record = container.store.get_rfp_by_id(processing_rfp)
        assert record.status == RfpStatus.ERROR
        assert record.error_detail == "LLM provider timed out"
        assert record.analysis_result is None
        assert container.queue.jobs_for(processing_rfp) == []
        assert container.workers.stats()["failed"] == 1

    def test_repeatedly_stalled_job_fails_rfp(self, container, fake_analyzer, processing_rfp):
        container.queue.visibility_timeout_seconds = 0
        for _ in range(3):
            assert container.queue.dequeue("crashed-worker") is not None

        assert drain(container.workers) == 1

        record = container.store.get_rfp_by_id(processing_rfp)
        assert record.status == RfpStatus.ERROR
        assert record.error_detail == "Lease expired after 0s on worker crashed-worker"
        assert fake_analyzer.calls == []
        assert container.queue.jobs_for(processing_rfp) == []
        assert container.workers.stats()["failed"] == 1

    def test_skips_rfp_not_processing(self, container, fake_analyzer, processing_rfp):
        container.queue.enqueue(processing_rfp)
        drain(container.workers)

        assert fake_analyzer.calls == ["The system shall implement multi-factor authentication."]
        assert container.store.get_rfp_by_id(processing_rfp).status == RfpStatus.ANALYZED
        assert container.workers.stats()["skipped"] == 1
        assert container.queue.jobs_for(processing_rfp) == []

    def test_skips_deleted_rfp(self, container, fake_analyzer, processing_rfp):
        container.store.delete_rfp(processing_rfp)

        drain(container.workers)

        assert fake_analyzer.calls == []
        assert container.queue.jobs_for(processing_rfp) == []

    def test_missing_text_is_a_failure(self, container, fake_analyzer, processing_rfp):
        container.store.patch_rfp(processing_rfp, {"extracted_text": None})

        drain(container.workers)

        record = container.store.get_rfp_by_id(processing_rfp)
        assert record.status == RfpStatus.ERROR
        assert "No extracted text" in record.error_detail
        assert fake_analyzer.calls == []


class TestLifecycle:
    """Tests for starting and stopping worker threads."""

    def test_invalid_size(self, container, fake_analyzer):
        with pytest.raises(ValueError):
            AnalysisWorkerPool(container.store, container.queue, fake_analyzer, size=0)

    def test_threads_drain_queue(self, container, processing_rfp):
        pool = container.workers
        pool.start()
        try:
            assert pool.running
            assert pool.stats()["workers"] == 2
            deadline = time.monotonic() + 5
            while time.monotonic() < deadline:
                if container.store.get_rfp_by_id(processing_rfp).status == RfpStatus.ANALYZED:
                    break
                time.sleep(0.02)
        finally:
            assert pool.stop(timeout=5) is True

        assert container.store.get_rfp_by_id(processing_rfp).status == RfpStatus.ANALYZED
        assert not pool.running
