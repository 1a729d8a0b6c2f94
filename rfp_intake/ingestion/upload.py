"""Upload orchestration: validate, hash, deduplicate, store, extract, enqueue."""

from pathlib import Path
from typing import Any, BinaryIO
from uuid import uuid4

from rfp_intake.errors import (
    DuplicateContent,
    DuplicateRecordError,
    ExtractionFailed,
    FileTooLarge,
    InvalidStateTransition,
    RfpNotFound,
    UnsupportedFormat,
    describe_error,
)
from rfp_intake.extraction.engine import TextExtractionEngine
from rfp_intake.ingestion.blob_store import BlobStore
from rfp_intake.ingestion.dedup import DeduplicationGate
from rfp_intake.ingestion.hasher import ContentHasher
from rfp_intake.models.records import (
    ExtractedText,
    ExtractionMetadata,
    JobHandle,
    RfpRecord,
    RfpStatus,
    SourceMetadata,
)
from rfp_intake.models.requests import UploadMetadata
from rfp_intake.models.responses import UploadResponse
from rfp_intake.queue.base import AnalysisQueue
from rfp_intake.store.base import RecordStore
from rfp_intake.utils.logging import LoggerMixin, bound_context

DUPLICATE_MESSAGE = "This RFP has already been uploaded"
QUEUED_MESSAGE = "RFP uploaded successfully and queued for analysis"

_STAGE_CHUNK_SIZE = 1024 * 1024


class UploadService(LoggerMixin):
    """Runs the synchronous half of the pipeline for one uploaded document."""

    def __init__(
        self,
        store: RecordStore,
        blob_store: BlobStore,
        engine: TextExtractionEngine,
        queue: AnalysisQueue,
        hasher: ContentHasher | None = None,
        upload_directory: Path | str = Path("./data/uploads/temp"),
        allowed_extensions: list[str] | None = None,
        allowed_mime_types: list[str] | None = None,
        max_file_size_bytes: int = 50 * 1024 * 1024,
        initial_delay_seconds: float = 1.0,
    ):
        self._store = store
        self._blobs = blob_store
        self._engine = engine
        self._queue = queue
        self._hasher = hasher or ContentHasher()
        self._dedup = DeduplicationGate(store)
        self.upload_directory = Path(upload_directory)
        self.allowed_extensions = [e.lower() for e in (allowed_extensions or [".pdf", ".txt"])]
        self.allowed_mime_types = [m.lower() for m in (allowed_mime_types or [])]
        self.max_file_size_bytes = max_file_size_bytes
        self.initial_delay_seconds = initial_delay_seconds

    def validate_filename(self, filename: str) -> str:
        """Return the lowercased extension, or raise UnsupportedFormat."""
        extension = Path(filename).suffix.lower()
        if extension not in self.allowed_extensions:
            raise UnsupportedFormat(
                f"Invalid file type. Allowed types: {', '.join(self.allowed_extensions)}",
                filename=filename,
                extension=extension,
            )
        return extension

    def validate_mime_type(self, mime_type: str | None, filename: str | None = None) -> None:
        """Reject a declared MIME type outside ``allowed_mime_types``.

        Nothing is checked when no type was declared or no allow-list is set.
        """
        if not mime_type or not self.allowed_mime_types:
            return
        base_type = mime_type.split(";")[0].strip().lower()
        if base_type not in self.allowed_mime_types:
            raise UnsupportedFormat(
                f"MIME type {base_type} is not allowed",
                filename=filename,
                mime_type=base_type,
            )

    def stage(self, stream: BinaryIO, filename: str) -> Path:
        """Copy an incoming stream into the transient upload directory.

        Raises:
            UnsupportedFormat: Extension not allowed.
            FileTooLarge: More than ``max_file_size_bytes`` were sent.
        """
        extension = self.validate_filename(filename)
        self.upload_directory.mkdir(parents=True, exist_ok=True)
        staged = self.upload_directory / f"{uuid4()}{extension}"

        written = 0
        try:
            with open(staged, "wb") as out:
                while chunk := stream.read(_STAGE_CHUNK_SIZE):
                    written += len(chunk)
                    if written > self.max_file_size_bytes:
                        raise FileTooLarge(
                            f"File exceeds the maximum size of {self.max_file_size_bytes} bytes",
                            max_bytes=self.max_file_size_bytes,
                        )
                    out.write(chunk)
        except Exception:
            staged.unlink(missing_ok=True)
            raise
        return staged

    def ingest(
        self,
        staged_path: Path,
        original_filename: str,
        metadata: UploadMetadata,
        organization_id: str,
        uploaded_by_id: str | None = None,
        mime_type: str | None = None,
    ) -> UploadResponse:
        """Take ownership of a staged file and run it through the pipeline.

        The staged file is always consumed: moved into the blob store or
        deleted.

        Raises:
            UnsupportedFormat: Extension or MIME type not allowed, or empty file.
            FileTooLarge: File over the size limit.
            ExtractionFailed: No text could be extracted; the record is
                left in ``error``.
        """
        staged_path = Path(staged_path)
        with bound_context(organization_id=organization_id, file=original_filename):
            try:
                extension = self.validate_filename(original_filename)
                self.validate_mime_type(mime_type, original_filename)
                file_size = staged_path.stat().st_size
                if file_size > self.max_file_size_bytes:
                    raise FileTooLarge(
                        f"File exceeds the maximum size of {self.max_file_size_bytes} bytes",
                        max_bytes=self.max_file_size_bytes,
                        file_size=file_size,
                    )
                if file_size == 0:
                    raise UnsupportedFormat("Uploaded file is empty", filename=original_filename)

                content_hash = self._hasher.hash_file(staged_path)
            except Exception:
                staged_path.unlink(missing_ok=True)
                raise

            try:
                self._dedup.ensure_new(content_hash, organization_id)
            except DuplicateContent as e:
                staged_path.unlink(missing_ok=True)
                return self._duplicate_response(e, content_hash, original_filename, file_size)

            rfp_id = str(uuid4())
            storage_ref = self._blobs.put(staged_path, rfp_id, extension)
            record = RfpRecord(
                id=rfp_id,
                organization_id=organization_id,
                uploaded_by_id=uploaded_by_id,
                title=metadata.title or original_filename,
                client_name=metadata.client_name,
                due_date=metadata.due_date,
                description=metadata.description,
                content_hash=content_hash,
                source_metadata=SourceMetadata(
                    original_file_name=original_filename,
                    file_size=file_size,
                    mime_type=mime_type,
                    storage_ref=storage_ref,
                    content_hash=content_hash,
                ),
            )

            try:
                record = self._store.create_rfp(record)
            except DuplicateRecordError:
                # Lost a race with a concurrent identical upload
                self._blobs.delete(storage_ref)
                try:
                    self._dedup.ensure_new(content_hash, organization_id)
                except DuplicateContent as e:
                    return self._duplicate_response(e, content_hash, original_filename, file_size)
                raise

            self._store.update_rfp_status(rfp_id, RfpStatus.PROCESSING, expected_status=RfpStatus.UPLOADED)
            self.extract_record(record)
            self.enqueue_record(rfp_id, delay=self.initial_delay_seconds)

            self.log_info("RFP ingested", rfp_id=rfp_id, content_hash=content_hash, size=file_size)
            return UploadResponse(
                rfp_id=rfp_id,
                original_file_name=original_filename,
                file_size=file_size,
                content_hash=content_hash,
                status=RfpStatus.PROCESSING,
                message=QUEUED_MESSAGE,
            )

    def extract_record(self, record: RfpRecord) -> ExtractedText:
        """Extract text for a ``processing`` record and store it.

        On failure the record moves to ``error``. ExtractionFailed is
        raised with the record id attached; any other error is re-raised
        as is.
        """
        source = record.source_metadata
        try:
            extracted = self._engine.extract(
                self._blobs.path_for(source.storage_ref),
                mime_hint=source.mime_type,
                filename=source.original_file_name,
            )
        except ExtractionFailed as e:
            self.mark_error(record.id, e.message, ExtractionMetadata(error=e.message))
            raise ExtractionFailed(e.primary_error, e.fallback_error, rfp_id=record.id) from e
        except Exception as e:
            detail = f"Text extraction failed: {describe_error(e)}"
            self.mark_error(record.id, detail, ExtractionMetadata(error=detail))
            raise

        self._store.patch_rfp(
            record.id,
            {
                "extracted_text": extracted.text,
                "extraction_metadata": extracted.to_metadata(),
            },
            expected_status=RfpStatus.PROCESSING,
        )
        return extracted

    def enqueue_record(self, rfp_id: str, priority: int | None = None, delay: float | None = None) -> JobHandle:
        """Queue a ``processing`` record for analysis.

        If the queue rejects the job the record moves to ``error`` so it
        can be triggered again, and the queue error is re-raised.
        """
        try:
            return self._queue.enqueue(rfp_id, priority=priority, delay=delay)
        except Exception as e:
            self.mark_error(rfp_id, f"Failed to queue analysis: {describe_error(e)}")
            raise

    def mark_error(
        self,
        rfp_id: str,
        detail: str,
        extraction_metadata: ExtractionMetadata | None = None,
    ) -> None:
        """Move a ``processing`` record to ``error`` with ``detail``."""
        patch: dict[str, Any] = {"error_detail": detail}
        if extraction_metadata is not None:
            patch["extraction_metadata"] = extraction_metadata
        try:
            self._store.update_rfp_status(rfp_id, RfpStatus.ERROR, patch, expected_status=RfpStatus.PROCESSING)
        except (InvalidStateTransition, RfpNotFound) as e:
            self.log_warning("Could not record failure", rfp_id=rfp_id, error=e.message, detail=detail)
            return
        self.log_error("RFP moved to error", rfp_id=rfp_id, error=detail)

    def _duplicate_response(
        self,
        duplicate: DuplicateContent,
        content_hash: str,
        filename: str,
        file_size: int,
    ) -> UploadResponse:
        return UploadResponse(
            rfp_id=duplicate.rfp_id,
            original_file_name=filename,
            file_size=file_size,
            content_hash=content_hash,
            status=RfpStatus(duplicate.status),
            message=DUPLICATE_MESSAGE,
            duplicate=True,
        )
