"""Record store contract."""

from abc import ABC, abstractmethod
from typing import Any

from rfp_intake.models.records import RfpRecord, RfpStatus


class RecordStore(ABC):
    """Persistence for RFP records.

    Status changes go through ``update_rfp_status``, which validates the
    transition and applies it as a compare-and-set on the stored status.
    """

    @abstractmethod
    def create_rfp(self, record: RfpRecord) -> RfpRecord:
        """Insert a new record.

        Raises:
            DuplicateRecordError: A live record with the same organization
                and content hash exists.
        """
        pass

    @abstractmethod
    def get_rfp_by_id(self, rfp_id: str, include_deleted: bool = False) -> RfpRecord | None:
        pass

    @abstractmethod
    def find_by_hash(self, content_hash: str, organization_id: str) -> RfpRecord | None:
        """Return the live record of ``organization_id`` with this content hash."""
        pass

    @abstractmethod
    def update_rfp_status(
        self,
        rfp_id: str,
        status: RfpStatus,
        patch: dict[str, Any] | None = None,
        *,
        expected_status: RfpStatus | None = None,
        manual: bool = False,
    ) -> RfpRecord:
        """Move a record to ``status`` and apply ``patch`` atomically.

        Raises:
            RfpNotFound: No live record with this id.
            InvalidStateTransition: The transition is not allowed, or the
                stored status is not ``expected_status``.
        """
        pass

    @abstractmethod
    def patch_rfp(
        self,
        rfp_id: str,
        patch: dict[str, Any],
        expected_status: RfpStatus | None = None,
    ) -> RfpRecord:
        """Update non-status fields."""
        pass

    @abstractmethod
    def delete_rfp(self, rfp_id: str) -> bool:
        """Soft-delete a record. Returns False if it was not live."""
        pass
