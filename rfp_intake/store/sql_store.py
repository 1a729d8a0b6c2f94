"""SQLAlchemy Core implementation of the record store."""

from typing import Any

from pydantic import BaseModel
from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import IntegrityError

from rfp_intake.errors import DuplicateRecordError, InvalidStateTransition, RfpNotFound
from rfp_intake.lifecycle import transition_patch, validate_transition
from rfp_intake.models.records import (
    AnalysisResult,
    ExtractionMetadata,
    RfpRecord,
    RfpStatus,
    SourceMetadata,
)
from rfp_intake.store.base import RecordStore
from rfp_intake.store.schema import rfps
from rfp_intake.utils.clock import Clock, utcnow
from rfp_intake.utils.logging import LoggerMixin

# Fields owned by update_rfp_status
_STATUS_FIELDS = {"status", "analysis_result", "error_detail"}
_IMMUTABLE_FIELDS = {"id", "organization_id", "content_hash", "created_at"}


def _to_column(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, RfpStatus):
        return value.value
    return value


def _row_to_record(row: Row) -> RfpRecord:
    data = row._asdict()
    return RfpRecord(
        id=data["id"],
        organization_id=data["organization_id"],
        uploaded_by_id=data["uploaded_by_id"],
        title=data["title"],
        client_name=data["client_name"],
        due_date=data["due_date"],
        description=data["description"],
        content_hash=data["content_hash"],
        status=RfpStatus(data["status"]),
        source_metadata=SourceMetadata.model_validate(data["source_metadata"]),
        extracted_text=data["extracted_text"],
        extraction_metadata=(
            ExtractionMetadata.model_validate(data["extraction_metadata"])
            if data["extraction_metadata"]
            else None
        ),
        analysis_result=(
            AnalysisResult.model_validate(data["analysis_result"])
            if data["analysis_result"]
            else None
        ),
        error_detail=data["error_detail"],
        created_at=data["created_at"],
        updated_at=data["updated_at"],
        deleted_at=data["deleted_at"],
    )


class SQLRecordStore(RecordStore, LoggerMixin):
    """Record store backed by the ``rfps`` table."""

    def __init__(self, engine: Engine, clock: Clock = utcnow):
        self._engine = engine
        self._clock = clock

    def create_rfp(self, record: RfpRecord) -> RfpRecord:
        now = self._clock()
        values = {
            "id": record.id,
            "organization_id": record.organization_id,
            "uploaded_by_id": record.uploaded_by_id,
            "title": record.title,
            "client_name": record.client_name,
            "due_date": record.due_date,
            "description": record.description,
            "content_hash": record.content_hash,
            "status": record.status.value,
            "source_metadata": _to_column(record.source_metadata),
            "extracted_text": record.extracted_text,
            "extraction_metadata": _to_column(record.extraction_metadata),
            "analysis_result": _to_column(record.analysis_result),
            "error_detail": record.error_detail,
            "created_at": now,
            "updated_at": now,
            "deleted_at": None,
        }
        try:
            with self._engine.begin() as conn:
                conn.execute(insert(rfps).values(**values))
        except IntegrityError as e:
            self.log_warning(
                "Duplicate RFP rejected by store",
                organization_id=record.organization_id,
                content_hash=record.content_hash,
            )
            raise DuplicateRecordError(
                "An RFP with this content already exists for the organization",
                organization_id=record.organization_id,
                content_hash=record.content_hash,
            ) from e

        self.log_info("RFP record created", rfp_id=record.id, status=record.status.value)
        return record.model_copy(update={"created_at": now, "updated_at": now})

    def get_rfp_by_id(self, rfp_id: str, include_deleted: bool = False) -> RfpRecord | None:
        stmt = select(rfps).where(rfps.c.id == rfp_id)
        if not include_deleted:
            stmt = stmt.where(rfps.c.deleted_at.is_(None))
        with self._engine.connect() as conn:
            row = conn.execute(stmt).first()
        return _row_to_record(row) if row else None

    def find_by_hash(self, content_hash: str, organization_id: str) -> RfpRecord | None:
        stmt = select(rfps).where(
            rfps.c.organization_id == organization_id,
            rfps.c.content_hash == content_hash,
            rfps.c.deleted_at.is_(None),
        )
        with self._engine.connect() as conn:
            row = conn.execute(stmt).first()
        return _row_to_record(row) if row else None

    def update_rfp_status(
        self,
        rfp_id: str,
        status: RfpStatus,
        patch: dict[str, Any] | None = None,
        *,
        expected_status: RfpStatus | None = None,
        manual: bool = False,
    ) -> RfpRecord:
        status = RfpStatus(status)
        patch = dict(patch or {})
        unknown = set(patch) & (_IMMUTABLE_FIELDS | {"status"})
        if unknown:
            raise ValueError(f"Cannot patch fields: {sorted(unknown)}")

        with self._engine.begin() as conn:
            row = conn.execute(
                select(rfps.c.status).where(rfps.c.id == rfp_id, rfps.c.deleted_at.is_(None))
            ).first()
            if row is None:
                raise RfpNotFound(rfp_id)

            current = RfpStatus(row.status)
            if expected_status is not None and current != RfpStatus(expected_status):
                raise InvalidStateTransition(
                    current.value,
                    status.value,
                    reason=f"expected status '{RfpStatus(expected_status).value}'",
                )

            validate_transition(current, status, manual=manual)
            values = {key: _to_column(value) for key, value in transition_patch(status, patch).items()}
            values["updated_at"] = self._clock()

            result = conn.execute(
                update(rfps)
                .where(
                    rfps.c.id == rfp_id,
                    rfps.c.status == current.value,
                    rfps.c.deleted_at.is_(None),
                )
                .values(**values)
            )
            if result.rowcount != 1:
                raise InvalidStateTransition(
                    current.value, status.value, reason="status changed concurrently"
                )

        self.log_info(
            "RFP status updated",
            rfp_id=rfp_id,
            from_status=current.value,
            to_status=status.value,
            manual=manual,
        )
        return self._require(rfp_id)

    def patch_rfp(
        self,
        rfp_id: str,
        patch: dict[str, Any],
        expected_status: RfpStatus | None = None,
    ) -> RfpRecord:
        forbidden = set(patch) & (_STATUS_FIELDS | _IMMUTABLE_FIELDS)
        if forbidden:
            raise ValueError(f"Fields {sorted(forbidden)} change only with the status")

        values = {key: _to_column(value) for key, value in patch.items()}
        values["updated_at"] = self._clock()

        stmt = update(rfps).where(rfps.c.id == rfp_id, rfps.c.deleted_at.is_(None))
        if expected_status is not None:
            stmt = stmt.where(rfps.c.status == RfpStatus(expected_status).value)

        with self._engine.begin() as conn:
            result = conn.execute(stmt.values(**values))

        if result.rowcount != 1:
            record = self.get_rfp_by_id(rfp_id)
            if record is None:
                raise RfpNotFound(rfp_id)
            raise InvalidStateTransition(
                record.status.value,
                record.status.value,
                reason=f"expected status '{RfpStatus(expected_status).value}'",
            )
        return self._require(rfp_id)

    def delete_rfp(self, rfp_id: str) -> bool:
        now = self._clock()
        with self._engine.begin() as conn:
            result = conn.execute(
                update(rfps)
                .where(rfps.c.id == rfp_id, rfps.c.deleted_at.is_(None))
                .values(deleted_at=now, updated_at=now)
            )
        deleted = result.rowcount == 1
        if deleted:
            self.log_info("RFP record soft-deleted", rfp_id=rfp_id)
        return deleted

    def _require(self, rfp_id: str) -> RfpRecord:
        record = self.get_rfp_by_id(rfp_id)
        if record is None:
            raise RfpNotFound(rfp_id)
        return record
