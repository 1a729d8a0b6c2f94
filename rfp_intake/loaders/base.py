"""Base document loader abstract class."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from rfp_intake.utils.logging import LoggerMixin


class LoadedDocument(BaseModel):
    """Raw text read by a local loader, before normalization."""

    text: str
    page_count: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class BaseDocumentLoader(ABC, LoggerMixin):
    """Abstract base class for local document loaders."""

    # File extensions this loader reads
    supported_extensions: tuple[str, ...] = ()

    def __init__(self, file_path: Path):
        """Initialize the loader with a file path.

        Args:
            file_path: Path to the stored document.
        """
        self.file_path = Path(file_path)
        self._validate_file()

    def _validate_file(self) -> None:
        """Validate that the file exists and is readable."""
        if not self.file_path.exists():
            raise FileNotFoundError(f"File not found: {self.file_path}")
        if not self.file_path.is_file():
            raise ValueError(f"Path is not a file: {self.file_path}")

    @abstractmethod
    def load(self) -> LoadedDocument:
        """Read the document text.

        Returns:
            LoadedDocument: Raw text plus whatever metadata the format carries.
        """
        pass

    @abstractmethod
    def extract_metadata(self) -> dict[str, Any]:
        """Extract metadata from the document.

        Returns:
            Dictionary containing document metadata.
        """
        pass
