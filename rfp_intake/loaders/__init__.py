"""Local document loaders used when the extraction service is unavailable."""

from pathlib import Path

from rfp_intake.errors import UnsupportedFormat
from rfp_intake.loaders.base import BaseDocumentLoader, LoadedDocument
from rfp_intake.loaders.pdf_loader import PDFLoader
from rfp_intake.loaders.text_loader import TextLoader

LOADERS: dict[str, type[BaseDocumentLoader]] = {
    extension: loader_cls for loader_cls in (PDFLoader, TextLoader) for extension in loader_cls.supported_extensions
}

MIME_EXTENSIONS = {
    "application/pdf": ".pdf",
    "text/plain": ".txt",
}


def resolve_extension(file_path: Path, mime_hint: str | None = None, filename: str | None = None) -> str:
    """Pick the format extension from the filename, else from the MIME hint."""
    for name in (filename, file_path.name):
        if name:
            suffix = Path(name).suffix.lower()
            if suffix:
                return suffix
    if mime_hint:
        return MIME_EXTENSIONS.get(mime_hint.split(";")[0].strip().lower(), "")
    return ""


def get_loader(file_path: Path, mime_hint: str | None = None, filename: str | None = None) -> BaseDocumentLoader:
    """Return the local loader for a stored document.

    Raises:
        UnsupportedFormat: No local loader handles this format.
    """
    extension = resolve_extension(Path(file_path), mime_hint, filename)
    loader_cls = LOADERS.get(extension)
    if loader_cls is None:
        raise UnsupportedFormat(
            f"No local extractor for format '{extension or mime_hint or 'unknown'}'",
            extension=extension,
            mime_type=mime_hint,
        )
    return loader_cls(file_path)


__all__ = [
    "BaseDocumentLoader",
    "LoadedDocument",
    "PDFLoader",
    "TextLoader",
    "get_loader",
    "resolve_extension",
]
