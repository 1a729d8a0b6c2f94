"""Status queries, manual re-analysis and rubric retrieval."""

from rfp_intake.errors import AccessDenied, AnalysisInProgress, AnalysisNotReady, RfpNotFound
from rfp_intake.ingestion.upload import UploadService
from rfp_intake.models.records import RfpRecord, RfpStatus
from rfp_intake.models.responses import (
    QueueStatsResponse,
    RfpStatusResponse,
    RubricResponse,
    TriggerAnalysisResponse,
)
from rfp_intake.queue.base import AnalysisQueue
from rfp_intake.store.base import RecordStore
from rfp_intake.utils.logging import LoggerMixin


class AnalysisService(LoggerMixin):
    """Organization-scoped access to RFP records and the analysis queue."""

    def __init__(self, store: RecordStore, queue: AnalysisQueue, uploads: UploadService):
        self._store = store
        self._queue = queue
        self._uploads = uploads

    def get_rfp(self, rfp_id: str, organization_id: str) -> RfpRecord:
        """Load a live record owned by ``organization_id``.

        Raises:
            RfpNotFound: No live record with this id.
            AccessDenied: The record belongs to another organization.
        """
        record = self._store.get_rfp_by_id(rfp_id)
        if record is None:
            raise RfpNotFound(rfp_id)
        if record.organization_id != organization_id:
            self.log_warning("Cross-organization access denied", rfp_id=rfp_id, organization_id=organization_id)
            raise AccessDenied("Access denied to this RFP", rfp_id=rfp_id)
        return record

    def get_status(self, rfp_id: str, organization_id: str) -> RfpStatusResponse:
        return RfpStatusResponse.from_record(self.get_rfp(rfp_id, organization_id))

    def get_analysis(self, rfp_id: str, organization_id: str) -> RfpStatusResponse:
        """Status plus extraction facts and, once analyzed, the analysis result."""
        return RfpStatusResponse.from_record(self.get_rfp(rfp_id, organization_id), include_extraction=True)

    def get_rubric(self, rfp_id: str, organization_id: str) -> RubricResponse:
        """Evaluation rubric of an analyzed RFP.

        Raises:
            AnalysisNotReady: The RFP is not analyzed yet.
        """
        record = self.get_rfp(rfp_id, organization_id)
        if record.status != RfpStatus.ANALYZED or record.analysis_result is None:
            raise AnalysisNotReady(rfp_id, record.status.value)

        result = record.analysis_result
        return RubricResponse(
            rfp_id=record.id,
            title=record.title,
            evaluation_criteria=result.evaluation_criteria,
            total_points=result.total_points,
            confidence_score=result.confidence_score,
            generated_at=result.analysis_completed_at,
        )

    def trigger_analysis(
        self,
        rfp_id: str,
        organization_id: str,
        priority: int | None = None,
        reanalyze: bool = False,
    ) -> TriggerAnalysisResponse:
        """Queue an RFP for (re-)analysis.

        An analyzed RFP is left untouched unless ``reanalyze`` is set.
        Text is extracted again from the stored document when missing.
        If the queue rejects the job the RFP is moved to error and the
        queue error propagates.

        Raises:
            AnalysisInProgress: The RFP is already processing.
            ExtractionFailed: Re-extraction failed; the RFP is in error.
        """
        record = self.get_rfp(rfp_id, organization_id)

        if record.status == RfpStatus.PROCESSING:
            raise AnalysisInProgress(rfp_id)

        if record.status == RfpStatus.ANALYZED and not reanalyze:
            return TriggerAnalysisResponse(
                rfp_id=rfp_id,
                status=record.status,
                queued=False,
                message="RFP has already been analyzed",
                analysis_result=record.analysis_result,
            )

        record = self._store.update_rfp_status(
            rfp_id,
            RfpStatus.PROCESSING,
            expected_status=record.status,
            manual=record.status in (RfpStatus.ANALYZED, RfpStatus.ERROR),
        )
        self._queue.purge(rfp_id)

        if not record.extracted_text:
            self.log_info("Re-running extraction before analysis", rfp_id=rfp_id)
            self._uploads.extract_record(record)

        handle = self._uploads.enqueue_record(rfp_id, priority=priority)
        self.log_info("Analysis triggered", rfp_id=rfp_id, job_id=handle.job_id, priority=handle.priority)
        return TriggerAnalysisResponse(
            rfp_id=rfp_id,
            status=RfpStatus.PROCESSING,
            queued=True,
            job_id=handle.job_id,
            message="RFP queued for analysis",
        )

    def delete_rfp(self, rfp_id: str, organization_id: str) -> bool:
        """Soft-delete an RFP and drop its pending jobs."""
        self.get_rfp(rfp_id, organization_id)
        self._queue.purge(rfp_id)
        return self._store.delete_rfp(rfp_id)

    def queue_stats(self) -> QueueStatsResponse:
        return QueueStatsResponse(**self._queue.stats())
