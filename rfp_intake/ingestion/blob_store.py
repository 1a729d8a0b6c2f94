"""Durable storage for uploaded documents."""

import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from rfp_intake.utils.logging import LoggerMixin


class BlobStore(ABC):
    """Keeps original document bytes under an opaque storage reference."""

    @abstractmethod
    def put(self, source: Path, rfp_id: str, extension: str) -> str:
        """Move ``source`` into the store and return its storage reference."""
        pass

    @abstractmethod
    def path_for(self, storage_ref: str) -> Path:
        """Local path readable by the extractors."""
        pass

    @abstractmethod
    def delete(self, storage_ref: str) -> bool:
        pass

    @abstractmethod
    def exists(self, storage_ref: str) -> bool:
        pass


class LocalBlobStore(BlobStore, LoggerMixin):
    """Stores documents as ``<root>/<rfp_id><ext>`` on the local filesystem."""

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def put(self, source: Path, rfp_id: str, extension: str) -> str:
        storage_ref = f"{rfp_id}{extension.lower()}"
        destination = self.root / storage_ref
        shutil.move(str(source), destination)
        self.log_debug("Document stored", rfp_id=rfp_id, storage_ref=storage_ref)
        return storage_ref

    def path_for(self, storage_ref: str) -> Path:
        path = (self.root / storage_ref).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Storage reference escapes the store: {storage_ref}")
        return path

    def delete(self, storage_ref: str) -> bool:
        path = self.path_for(storage_ref)
        if not path.exists():
            return False
        path.unlink()
        self.log_debug("Document removed", storage_ref=storage_ref)
        return True

    def exists(self, storage_ref: str) -> bool:
        return self.path_for(storage_ref).is_file()
