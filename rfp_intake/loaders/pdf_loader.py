"""PDF document loader using PyMuPDF."""

from pathlib import Path
from typing import Any

import fitz  # PyMuPDF

from rfp_intake.loaders.base import BaseDocumentLoader, LoadedDocument


class PDFLoader(BaseDocumentLoader):
    """Reads the text layer of a PDF page by page."""

    supported_extensions = (".pdf",)

    def __init__(self, file_path: Path):
        super().__init__(file_path)
        self._doc: fitz.Document | None = None

    def _open_document(self) -> fitz.Document:
        """Open the PDF document."""
        if self._doc is None:
            self._doc = fitz.open(self.file_path)
        return self._doc

    def _close_document(self) -> None:
        """Close the PDF document."""
        if self._doc is not None:
            self._doc.close()
            self._doc = None

    def load(self) -> LoadedDocument:
        """Load the PDF text and metadata."""
        self.log_info("Loading PDF document", file=str(self.file_path))

        try:
            doc = self._open_document()
            metadata = self.extract_metadata()
            text = self._extract_full_text(doc)

            self.log_info("PDF loaded successfully", pages=len(doc), characters=len(text))
            return LoadedDocument(text=text, page_count=len(doc), metadata=metadata)

        finally:
            self._close_document()

    def _extract_full_text(self, doc: fitz.Document) -> str:
        """Extract full text from all pages."""
        return "\n\n".join(page.get_text("text") for page in doc)

    def extract_metadata(self) -> dict[str, Any]:
        """Extract PDF metadata, skipping empty fields."""
        doc = self._open_document()
        pdf_metadata = doc.metadata or {}

        metadata = {
            "content_type": "application/pdf",
            "title": pdf_metadata.get("title", ""),
            "author": pdf_metadata.get("author", ""),
            "subject": pdf_metadata.get("subject", ""),
            "creator": pdf_metadata.get("creator", ""),
            "producer": pdf_metadata.get("producer", ""),
            "created": pdf_metadata.get("creationDate", ""),
            "modified": pdf_metadata.get("modDate", ""),
        }
        return {key: value for key, value in metadata.items() if value}
