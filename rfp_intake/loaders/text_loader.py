"""Plain text document loader."""

from typing import Any

from rfp_intake.loaders.base import BaseDocumentLoader, LoadedDocument


class TextLoader(BaseDocumentLoader):
    """Reads a document as UTF-8, replacing undecodable bytes."""

    supported_extensions = (".txt",)

    def load(self) -> LoadedDocument:
        self.log_info("Loading text document", file=str(self.file_path))
        text = self.file_path.read_bytes().decode("utf-8", errors="replace")
        return LoadedDocument(text=text, metadata=self.extract_metadata())

    def extract_metadata(self) -> dict[str, Any]:
        return {"content_type": "text/plain"}
