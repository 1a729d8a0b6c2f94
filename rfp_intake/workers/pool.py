"""Worker pool that drains the analysis queue."""

import threading
from typing import Any

from rfp_intake.config import Settings
from rfp_intake.errors import (
    AnalysisPermanentFailure,
    InvalidStateTransition,
    RfpNotFound,
    describe_error,
)
from rfp_intake.llm.base import SemanticAnalyzer
from rfp_intake.models.records import AnalysisJob, RfpStatus
from rfp_intake.queue.base import AnalysisQueue
from rfp_intake.store.base import RecordStore
from rfp_intake.utils.logging import LoggerMixin, bound_context


class AnalysisWorkerPool(LoggerMixin):
    """Runs ``size`` threads, each looping dequeue, analyze, persist, ack.

    Workers share only the queue and the record store. Per-RFP ordering
    relies on the store's compare-and-set status update.
    """

    def __init__(
        self,
        store: RecordStore,
        queue: AnalysisQueue,
        analyzer: SemanticAnalyzer,
        size: int = 2,
        poll_interval: float = 1.0,
        name: str = "analysis-worker",
    ):
        if size < 1:
            raise ValueError("Worker pool size must be at least 1")
        self._store = store
        self._queue = queue
        self._analyzer = analyzer
        self.size = size
        self.poll_interval = poll_interval
        self.name = name

        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []
        self._counters = {"processed": 0, "retried": 0, "failed": 0, "skipped": 0}
        self._counters_lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        store: RecordStore,
        queue: AnalysisQueue,
        analyzer: SemanticAnalyzer,
        settings: Settings,
    ) -> "AnalysisWorkerPool":
        return cls(
            store,
            queue,
            analyzer,
            size=settings.worker_pool_size,
            poll_interval=settings.worker_poll_interval_seconds,
        )

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def start(self) -> None:
        """Start the worker threads."""
        if self.running:
            return
        self._stop_event.clear()
        self._threads = [
            threading.Thread(
                target=self._loop,
                args=(f"{self.name}-{i + 1}",),
                name=f"{self.name}-{i + 1}",
                daemon=True,
            )
            for i in range(self.size)
        ]
        for thread in self._threads:
            thread.start()
        self.log_info("Worker pool started", size=self.size)

    def stop(self, timeout: float | None = None) -> bool:
        """Stop polling and wait for in-flight jobs.

        Returns:
            True if every worker finished within ``timeout``.
        """
        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout)
        stopped = not self.running
        if stopped:
            self.log_info("Worker pool stopped", **self.stats())
        else:
            self.log_warning("Worker pool did not stop within timeout", timeout=timeout)
        return stopped

    def stats(self) -> dict[str, Any]:
        with self._counters_lock:
            counters = dict(self._counters)
        return {**counters, "workers": sum(1 for t in self._threads if t.is_alive())}

    def _count(self, key: str) -> None:
        with self._counters_lock:
            self._counters[key] += 1

    def _loop(self, worker_id: str) -> None:
        with bound_context(worker_id=worker_id):
            self.log_info("Worker started")
            while not self._stop_event.is_set():
                try:
                    handled = self.run_once(worker_id)
                except Exception:
                    self.log_exception("Worker iteration failed")
                    handled = False
                if not handled:
                    self._stop_event.wait(self.poll_interval)
            self.log_info("Worker stopped")

    def run_once(self, worker_id: str) -> bool:
        """Process at most one job.

        Returns:
            True if a job was dequeued.
        """
        job = self._queue.dequeue(worker_id)
        if job is None:
            return False

        with bound_context(job_id=job.id, rfp_id=job.rfp_id, attempt=job.attempt):
            self._process(job, worker_id)
        return True

    def _process(self, job: AnalysisJob, worker_id: str) -> None:
        if job.exhausted:
            self._queue.ack(job.id, worker_id)
            self._give_up(job, job.attempt, job.last_error or "Analysis did not finish")
            return

        record = self._store.get_rfp_by_id(job.rfp_id)
        if record is None or record.status != RfpStatus.PROCESSING:
            self.log_info(
                "Skipping job for RFP that is not processing",
                status=record.status.value if record else None,
            )
            self._queue.ack(job.id, worker_id)
            self._count("skipped")
            return

        if not record.extracted_text:
            self._fail(job, worker_id, f"No extracted text found for RFP: {job.rfp_id}")
            return

        self.log_info("Analyzing RFP", characters=len(record.extracted_text))
        try:
            result = self._analyzer.analyze(record.extracted_text)
        except Exception as e:
            self._fail(job, worker_id, describe_error(e))
            return

        try:
            self._store.update_rfp_status(
                job.rfp_id,
                RfpStatus.ANALYZED,
                {"analysis_result": result},
                expected_status=RfpStatus.PROCESSING,
            )
        except (InvalidStateTransition, RfpNotFound) as e:
            self.log_warning("RFP changed during analysis, discarding result", error=e.message)
            self._queue.ack(job.id, worker_id)
            self._count("skipped")
            return
        except Exception as e:
            self._fail(job, worker_id, describe_error(e))
            return

        self._queue.ack(job.id, worker_id)
        self._count("processed")
        self.log_info(
            "RFP analysis completed",
            requirements_count=len(result.requirements),
            confidence_score=result.confidence_score,
        )

    def _fail(self, job: AnalysisJob, worker_id: str, message: str) -> None:
        outcome = self._queue.nack(job.id, message, worker_id=worker_id)
        if not outcome.exhausted:
            self._count("retried")
            self.log_warning("Analysis attempt failed", error=message, retry_at=outcome.retry_at)
            return
        self._give_up(job, outcome.attempt, message)

    def _give_up(self, job: AnalysisJob, attempts: int, message: str) -> None:
        failure = AnalysisPermanentFailure(job.rfp_id, attempts, message)
        self._count("failed")
        self.log_error("RFP analysis failed permanently", attempts=failure.attempts, error=failure.last_error)
        try:
            self._store.update_rfp_status(
                job.rfp_id,
                RfpStatus.ERROR,
                {"error_detail": failure.last_error},
                expected_status=RfpStatus.PROCESSING,
            )
        except (InvalidStateTransition, RfpNotFound) as e:
            self.log_warning("Could not record analysis failure", error=e.message)
