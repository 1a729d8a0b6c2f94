"""Analysis job queue contract."""

from abc import ABC, abstractmethod

from rfp_intake.models.records import AnalysisJob, JobHandle, NackOutcome


class AnalysisQueue(ABC):
    """Durable, prioritized queue of analysis jobs with at-least-once delivery.

    Higher priority is delivered first, FIFO within a priority. A leased
    job that is neither acked nor nacked before its lease expires is
    delivered again.
    """

    @abstractmethod
    def enqueue(
        self,
        rfp_id: str,
        priority: int | None = None,
        delay: float | None = None,
        max_attempts: int | None = None,
    ) -> JobHandle:
        pass

    @abstractmethod
    def dequeue(self, worker_id: str) -> AnalysisJob | None:
        """Lease the next visible job, or return None when nothing is ready.

        A delivered job can already be ``exhausted`` when its previous lease
        expired on the last allowed attempt.
        """
        pass

    @abstractmethod
    def ack(self, job_id: str, worker_id: str | None = None) -> bool:
        """Remove a completed job."""
        pass

    @abstractmethod
    def nack(
        self,
        job_id: str,
        error: str,
        retry_after: float | None = None,
        worker_id: str | None = None,
    ) -> NackOutcome:
        """Record a failed delivery; requeue with backoff or give up."""
        pass

    @abstractmethod
    def stats(self) -> dict[str, int]:
        """Counts of waiting, delayed, active and stalled jobs."""
        pass

    @abstractmethod
    def jobs_for(self, rfp_id: str) -> list[AnalysisJob]:
        pass

    @abstractmethod
    def purge(self, rfp_id: str) -> int:
        """Drop every job of an RFP. Returns the number removed."""
        pass
