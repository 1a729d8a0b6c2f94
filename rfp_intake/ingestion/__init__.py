"""Document ingestion."""

from rfp_intake.ingestion.blob_store import BlobStore, LocalBlobStore
from rfp_intake.ingestion.dedup import DeduplicationGate
from rfp_intake.ingestion.hasher import ContentHasher
from rfp_intake.ingestion.upload import DUPLICATE_MESSAGE, QUEUED_MESSAGE, UploadService

__all__ = [
    "BlobStore",
    "ContentHasher",
    "DUPLICATE_MESSAGE",
    "DeduplicationGate",
    "LocalBlobStore",
    "QUEUED_MESSAGE",
    "UploadService",
]
