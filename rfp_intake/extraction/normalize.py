"""Text normalization applied to every extraction result."""

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_HORIZONTAL_WS = re.compile(r"[^\S\n]+")
_SPACES_AROUND_NEWLINE = re.compile(r" *\n *")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def normalize_text(text: str) -> str:
    """Canonicalize extracted text.

    Line endings become ``\\n``, control characters other than newline and
    tab are removed, horizontal whitespace runs (tabs included) collapse to
    one space, spaces next to newlines are dropped, at most one blank line
    is kept between paragraphs, and the result is trimmed.

    ``normalize_text(normalize_text(x)) == normalize_text(x)``.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS.sub("", text)
    text = _HORIZONTAL_WS.sub(" ", text)
    text = _SPACES_AROUND_NEWLINE.sub("\n", text)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()


def count_words(text: str) -> int:
    """Number of whitespace-delimited tokens."""
    return len(text.split())
