"""Per-organization duplicate detection."""

from rfp_intake.errors import DuplicateContent
from rfp_intake.models.records import RfpRecord
from rfp_intake.store.base import RecordStore
from rfp_intake.utils.logging import LoggerMixin


class DeduplicationGate(LoggerMixin):
    """Finds an existing live RFP with the same content in the same organization."""

    def __init__(self, store: RecordStore):
        self._store = store

    def check(self, content_hash: str, organization_id: str) -> RfpRecord | None:
        existing = self._store.find_by_hash(content_hash, organization_id)
        if existing is not None:
            self.log_info(
                "Duplicate upload detected",
                rfp_id=existing.id,
                organization_id=organization_id,
                status=existing.status.value,
            )
        return existing

    def ensure_new(self, content_hash: str, organization_id: str) -> None:
        """Raise DuplicateContent when the organization already holds this content."""
        existing = self.check(content_hash, organization_id)
        if existing is not None:
            raise DuplicateContent(existing.id, existing.status.value)
