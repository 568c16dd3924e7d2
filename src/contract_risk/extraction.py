"""Plain-text extraction from contract files.

Supports plain text, PDF (via pdfplumber) and DOCX (via python-docx).
Scanned images need OCR and are not handled here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from .exceptions import ExtractionError


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def _read_pdf(path: Path) -> str:
    """Extract text page by page; pages are separated by a blank line."""
    try:
        import pdfplumber
    except ImportError as exc:
        raise ExtractionError(
            "pdfplumber is required for PDF extraction. Install it with: pip install pdfplumber"
        ) from exc

    with pdfplumber.open(str(path)) as pdf:
        pages = [(page.extract_text() or "").strip() for page in pdf.pages]
    return "\n\n".join(page for page in pages if page)


def _read_docx(path: Path) -> str:
    try:
        from docx import Document
    except ImportError as exc:
        raise ExtractionError(
            "python-docx is required for DOCX extraction. Install it with: pip install python-docx"
        ) from exc

    doc = Document(str(path))
    return "\n\n".join(p.text for p in doc.paragraphs if p.text.strip())


EXTRACTORS: dict[str, Callable[[Path], str]] = {
    ".txt": _read_text,
    ".text": _read_text,
    ".md": _read_text,
    ".pdf": _read_pdf,
    ".docx": _read_docx,
}


def extract_text(file_path: str | Path) -> str:
    """Return the plain text of a contract file.

    Args:
        file_path: Path to a .txt/.text/.md, .pdf or .docx file.

    Returns:
        The extracted text (not yet normalized).

    Raises:
        FileNotFoundError: If the file does not exist.
        ExtractionError: If the format is unsupported or the file is unreadable.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    extractor = EXTRACTORS.get(path.suffix.lower())
    if extractor is None:
        raise ExtractionError(
            f"Unsupported file extension '{path.suffix}'. "
            f"Supported formats: {', '.join(sorted(EXTRACTORS))}"
        )

    try:
        return extractor(path)
    except ExtractionError:
        raise
    except Exception as exc:
        raise ExtractionError(f"Could not extract text from {path.name}: {exc}") from exc
