from __future__ import annotations

from io import BytesIO
from pathlib import PurePath
from zipfile import BadZipFile

from pypdf import PdfReader
from pypdf.errors import PdfReadError
from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from .models import ParsedUpload

TEXT_EXTENSIONS = {".txt", ".md", ".markdown", ".csv", ".json", ".html", ".htm", ".xml", ".yaml", ".yml"}
PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class UnsupportedUpload(ValueError):
    pass


def _parse_txt(data: bytes) -> tuple[str, list[str]]:
    warnings: list[str] = []
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = data.decode("utf-8", errors="replace")
        warnings.append("File is not valid UTF-8; undecodable bytes were replaced.")
    return text, warnings


def _parse_pdf(data: bytes) -> tuple[str, list[str]]:
    warnings: list[str] = []
    try:
        reader = PdfReader(BytesIO(data))
        text_parts: list[str] = []
        for page in reader.pages:
            page_text = (page.extract_text() or "").strip()
            if page_text:
                text_parts.append(page_text)
        if not text_parts:
            warnings.append("No extractable text found in PDF.")
        return "\n".join(text_parts), warnings
    except (PdfReadError, ValueError, KeyError) as exc:
        warnings.append(f"PDF parsing failed: {exc}")
        return "", warnings


def _parse_docx(data: bytes) -> tuple[str, list[str]]:
    warnings: list[str] = []
    try:
        document = Document(BytesIO(data))
    except (PackageNotFoundError, BadZipFile, ValueError, KeyError) as exc:
        warnings.append(f"DOCX parsing failed: {exc}")
        return "", warnings
    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    if not paragraphs:
        warnings.append("No extractable text found in DOCX.")
    return "\n".join(paragraphs), warnings


def parse_upload(filename: str, data: bytes, content_type: str | None = None) -> ParsedUpload:
    extension = PurePath(filename or "").suffix.lower()
    mime = (content_type or "").split(";")[0].strip().lower()

    if extension == ".pdf" or mime == PDF_MIME:
        source_type, mime_type = "pdf", PDF_MIME
        text, warnings = _parse_pdf(data)
    elif extension == ".docx" or mime == DOCX_MIME:
        source_type, mime_type = "docx", DOCX_MIME
        text, warnings = _parse_docx(data)
    elif extension in TEXT_EXTENSIONS or mime.startswith("text/") or (not extension and not mime):
        source_type, mime_type = "txt", mime or "text/plain"
        text, warnings = _parse_txt(data)
    else:
        raise UnsupportedUpload(
            f"Unsupported file type '{extension or mime}'. Supported types: text files, .pdf, .docx"
        )

    return ParsedUpload(
        name=filename or "untitled.txt",
        source_type=source_type,
        mime_type=mime_type,
        text=text,
        parsing_warnings=warnings,
    )
