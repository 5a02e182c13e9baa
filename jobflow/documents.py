"""Turn an uploaded résumé file into something the AI service can read.

Images are passed through as base64 data URLs. PDF (via pypdf), DOCX
(via stdlib zipfile) and plain text are reduced to text first.
"""
from __future__ import annotations

import base64
import io
import re
import zipfile
from pathlib import PurePath
from xml.etree import ElementTree

from jobflow.errors import ValidationError
from jobflow.log import get_logger

log = get_logger(__name__)

IMAGE_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

_MAGIC: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", ".png"),
    (b"\xff\xd8\xff", ".jpg"),
    (b"GIF8", ".gif"),
    (b"%PDF", ".pdf"),
    (b"PK\x03\x04", ".docx"),
)


def detect_suffix(data: bytes, filename: str = "") -> str:
    """File suffix from the name, or sniffed from the leading bytes."""
    suffix = PurePath(filename).suffix.lower() if filename else ""
    if suffix:
        return suffix
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp"
    for magic, ext in _MAGIC:
        if data.startswith(magic):
            return ext
    return ".txt"


def is_image(data: bytes, filename: str = "") -> bool:
    return detect_suffix(data, filename) in IMAGE_TYPES


def to_data_url(data: bytes, filename: str = "") -> str:
    mime = IMAGE_TYPES.get(detect_suffix(data, filename), "application/octet-stream")
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def extract_text(data: bytes, filename: str = "") -> str:
    """Return plain text from PDF, DOCX or TXT bytes."""
    suffix = detect_suffix(data, filename)
    if suffix in (".txt", ".md"):
        return data.decode("utf-8", errors="ignore")
    if suffix == ".docx":
        return _extract_docx(data)
    if suffix == ".pdf":
        return _extract_pdf(data)
    raise ValidationError(f"Unsupported résumé format: {suffix}")


def _fix_spacing(text: str) -> str:
    """Re-insert spaces when PDF extraction runs words together."""
    if not text or len(text) < 50:
        return text
    space_ratio = text.count(" ") / len(text)
    if space_ratio > 0.08:
        return text

    log.debug("Low space ratio (%.2f%%) — applying spacing fix", space_ratio * 100)
    fixed = re.sub(r"([a-z])([A-Z])", r"\1 \2", text)
    fixed = re.sub(r"([a-zA-Z])(\d)", r"\1 \2", fixed)
    fixed = re.sub(r"(\d)([a-zA-Z])", r"\1 \2", fixed)
    fixed = re.sub(r"([.!?,;:])([A-Za-z])", r"\1 \2", fixed)
    return fixed


def _extract_pdf(data: bytes) -> str:
    from pypdf import PdfReader
    from pypdf.errors import PdfReadError

    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [_fix_spacing(page.extract_text() or "") for page in reader.pages]
    except PdfReadError as exc:
        raise ValidationError(f"Could not read PDF: {exc}") from exc
    return "\n".join(pages)


def _extract_docx(data: bytes) -> str:
    ns = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
    texts: list[str] = []
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            with zf.open("word/document.xml") as f:
                tree = ElementTree.parse(f)
    except (zipfile.BadZipFile, KeyError, ElementTree.ParseError) as exc:
        raise ValidationError(f"Could not read DOCX: {exc}") from exc
    for para in tree.iter(f"{ns}p"):
        parts = [node.text for node in para.iter(f"{ns}t") if node.text]
        if parts:
            texts.append("".join(parts))
    return "\n".join(texts)
