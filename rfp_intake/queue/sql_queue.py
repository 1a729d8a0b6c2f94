"""Analysis queue stored in the ``analysis_jobs`` table."""

from uuid import uuid4

from sqlalchemy import and_, delete, func, insert, or_, select, update
from sqlalchemy.engine import Engine, Row

from rfp_intake.config import Settings
from rfp_intake.models.records import AnalysisJob, JobHandle, NackOutcome
from rfp_intake.queue.backoff import backoff_seconds
from rfp_intake.queue.base import AnalysisQueue
from rfp_intake.store.schema import analysis_jobs
from rfp_intake.utils.clock import Clock, seconds_from, utcnow
from rfp_intake.utils.logging import LoggerMixin

QUEUED = "queued"
LEASED = "leased"

# Candidates examined per dequeue before giving up on contention
_CLAIM_BATCH = 5


def _row_to_job(row: Row) -> AnalysisJob:
    return AnalysisJob(
        id=row.id,
        rfp_id=row.rfp_id,
        priority=row.priority,
        attempt=row.attempt,
        max_attempts=row.max_attempts,
        visible_after=row.visible_after,
        enqueued_at=row.enqueued_at,
        leased_by=row.leased_by,
        leased_until=row.leased_until,
        last_error=row.last_error,
    )


class SQLAnalysisQueue(AnalysisQueue, LoggerMixin):
    """Polling queue over a SQL table.

    Leases are claimed with a conditional UPDATE, so a job is held by at
    most one worker at a time. ``attempt`` counts failed deliveries,
    including leases that expired without an ack or nack.
    """

    name = "rfp-analysis"

    def __init__(
        self,
        engine: Engine,
        default_priority: int = 1,
        max_attempts: int = 3,
        backoff_base_seconds: float = 2.0,
        backoff_max_seconds: float = 60.0,
        visibility_timeout_seconds: float = 300.0,
        clock: Clock = utcnow,
    ):
        self._engine = engine
        self.default_priority = default_priority
        self.max_attempts = max_attempts
        self.backoff_base_seconds = backoff_base_seconds
        self.backoff_max_seconds = backoff_max_seconds
        self.visibility_timeout_seconds = visibility_timeout_seconds
        self._clock = clock

    @classmethod
    def from_settings(cls, engine: Engine, settings: Settings, clock: Clock = utcnow) -> "SQLAnalysisQueue":
        return cls(
            engine,
            default_priority=settings.queue_default_priority,
            max_attempts=settings.queue_max_attempts,
            backoff_base_seconds=settings.queue_backoff_base_seconds,
            backoff_max_seconds=settings.queue_backoff_max_seconds,
            visibility_timeout_seconds=settings.queue_visibility_timeout_seconds,
            clock=clock,
        )

    def enqueue(
        self,
        rfp_id: str,
        priority: int | None = None,
        delay: float | None = None,
        max_attempts: int | None = None,
    ) -> JobHandle:
        now = self._clock()
        job_id = str(uuid4())
        priority = self.default_priority if priority is None else priority
        max_attempts = max_attempts or self.max_attempts
        visible_after = seconds_from(now, delay or 0)

        with self._engine.begin() as conn:
            conn.execute(
                insert(analysis_jobs).values(
                    id=job_id,
                    rfp_id=rfp_id,
                    priority=priority,
                    attempt=0,
                    max_attempts=max_attempts,
                    status=QUEUED,
                    visible_after=visible_after,
                    enqueued_at=now,
                )
            )

        self.log_info(
            "Analysis job enqueued",
            job_id=job_id,
            rfp_id=rfp_id,
            priority=priority,
            delay=delay or 0,
        )
        return JobHandle(job_id=job_id, rfp_id=rfp_id, priority=priority, visible_after=visible_after)

    def _ready(self, now):
        c = analysis_jobs.c
        return or_(
            and_(c.status == QUEUED, c.visible_after <= now),
            and_(c.status == LEASED, c.leased_until <= now),
        )

    def dequeue(self, worker_id: str) -> AnalysisJob | None:
        """Lease the next ready job.

        Reclaiming a stalled lease counts as a failed delivery: ``attempt``
        is incremented and the returned job may be ``exhausted``, in which
        case the caller must not run it again.
        """
        now = self._clock()
        c = analysis_jobs.c
        lease_until = seconds_from(now, self.visibility_timeout_seconds)

        with self._engine.begin() as conn:
            candidates = conn.execute(
                select(c.id, c.status, c.leased_by, c.attempt)
                .where(self._ready(now))
                .order_by(c.priority.desc(), c.seq.asc())
                .limit(_CLAIM_BATCH)
            ).all()

            for candidate in candidates:
                values = {"status": LEASED, "leased_by": worker_id, "leased_until": lease_until}
                stalled = candidate.status == LEASED
                if stalled:
                    values["attempt"] = candidate.attempt + 1
                    values["last_error"] = (
                        f"Lease expired after {self.visibility_timeout_seconds:g}s on worker {candidate.leased_by}"
                    )
                claimed = conn.execute(
                    update(analysis_jobs)
                    .where(c.id == candidate.id, c.attempt == candidate.attempt, self._ready(now))
                    .values(**values)
                )
                if claimed.rowcount != 1:
                    continue

                if stalled:
                    self.log_warning(
                        "Stalled job redelivered",
                        job_id=candidate.id,
                        previous_worker=candidate.leased_by,
                        worker_id=worker_id,
                        attempt=values["attempt"],
                    )
                row = conn.execute(select(analysis_jobs).where(c.id == candidate.id)).one()
                return _row_to_job(row)

        return None

    def ack(self, job_id: str, worker_id: str | None = None) -> bool:
        c = analysis_jobs.c
        stmt = delete(analysis_jobs).where(c.id == job_id)
        if worker_id is not None:
            stmt = stmt.where(c.leased_by == worker_id)

        with self._engine.begin() as conn:
            removed = conn.execute(stmt).rowcount == 1

        if removed:
            self.log_debug("Analysis job acked", job_id=job_id)
        else:
            self.log_warning("Ack for unknown or lost job", job_id=job_id, worker_id=worker_id)
        return removed

    def nack(
        self,
        job_id: str,
        error: str,
        retry_after: float | None = None,
        worker_id: str | None = None,
    ) -> NackOutcome:
        now = self._clock()
        c = analysis_jobs.c

        with self._engine.begin() as conn:
            stmt = select(analysis_jobs).where(c.id == job_id)
            if worker_id is not None:
                stmt = stmt.where(c.leased_by == worker_id)
            row = conn.execute(stmt).first()

            if row is None:
                self.log_warning("Nack for unknown or lost job", job_id=job_id, worker_id=worker_id)
                return NackOutcome(job_id=job_id, attempt=0, exhausted=False)

            attempt = row.attempt + 1
            if attempt >= row.max_attempts:
                conn.execute(delete(analysis_jobs).where(c.id == job_id))
                self.log_warning(
                    "Analysis job exhausted its attempts",
                    job_id=job_id,
                    rfp_id=row.rfp_id,
                    attempt=attempt,
                    max_attempts=row.max_attempts,
                    error=error,
                )
                return NackOutcome(job_id=job_id, attempt=attempt, exhausted=True)

            delay = retry_after
            if delay is None:
                delay = backoff_seconds(attempt, self.backoff_base_seconds, self.backoff_max_seconds)
            retry_at = seconds_from(now, delay)

            conn.execute(
                update(analysis_jobs)
                .where(c.id == job_id)
                .values(
                    status=QUEUED,
                    attempt=attempt,
                    visible_after=retry_at,
                    leased_by=None,
                    leased_until=None,
                    last_error=error,
                )
            )

        self.log_info(
            "Analysis job requeued",
            job_id=job_id,
            rfp_id=row.rfp_id,
            attempt=attempt,
            retry_in_seconds=delay,
        )
        return NackOutcome(job_id=job_id, attempt=attempt, exhausted=False, retry_at=retry_at)

    def stats(self) -> dict[str, int]:
        now = self._clock()
        c = analysis_jobs.c
        conditions = {
            "waiting": and_(c.status == QUEUED, c.visible_after <= now),
            "delayed": and_(c.status == QUEUED, c.visible_after > now),
            "active": and_(c.status == LEASED, c.leased_until > now),
            "stalled": and_(c.status == LEASED, c.leased_until <= now),
        }
        with self._engine.connect() as conn:
            return {
                name: conn.execute(select(func.count()).select_from(analysis_jobs).where(cond)).scalar_one()
                for name, cond in conditions.items()
            }

    def jobs_for(self, rfp_id: str) -> list[AnalysisJob]:
        c = analysis_jobs.c
        with self._engine.connect() as conn:
            rows = conn.execute(select(analysis_jobs).where(c.rfp_id == rfp_id).order_by(c.seq)).all()
        return [_row_to_job(row) for row in rows]

    def purge(self, rfp_id: str) -> int:
        with self._engine.begin() as conn:
            removed = conn.execute(delete(analysis_jobs).where(analysis_jobs.c.rfp_id == rfp_id)).rowcount
        if removed:
            self.log_info("Purged analysis jobs", rfp_id=rfp_id, count=removed)
        return removed
