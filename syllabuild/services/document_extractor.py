"""Syllabus text extraction for uploaded PDF, Word and plain-text files."""

import io
import logging
import re
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# Supported file extensions and their MIME types. Images go through OCR instead.
SUPPORTED_EXTENSIONS = {
    '.pdf': 'application/pdf',
    '.docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    '.txt': 'text/plain',
}

SUPPORTED_MIME_TYPES = set(SUPPORTED_EXTENSIONS.values())

# Below this the upload is probably a scan
MIN_EXTRACTED_CHARS = 20


def normalize_text(text: str) -> str:
    """Strip NULs, unify newlines and collapse runs of blank lines and spaces."""
    text = (text or "").replace("\x00", "").replace("\r\n", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    return text.strip()


def is_supported_document(filename: str, content_type: Optional[str]) -> bool:
    """Check if a file is a supported document type."""
    lower_filename = (filename or "").lower()
    if any(lower_filename.endswith(ext) for ext in SUPPORTED_EXTENSIONS):
        return True
    return content_type in SUPPORTED_MIME_TYPES


def extract_text_from_pdf(file_content: bytes) -> str:
    """Extract text from a PDF file, one labelled block per page."""
    try:
        from PyPDF2 import PdfReader

        reader = PdfReader(io.BytesIO(file_content))

        page_texts = [normalize_text(page.extract_text() or "") for page in reader.pages]
        # A scanned PDF has pages but no text layer
        if not any(page_texts):
            return ""

        return "\n\n".join(
            f"--- Page {number} ---\n{text}" for number, text in enumerate(page_texts, start=1)
        )
    except Exception as e:
        logger.error(f"Failed to extract text from PDF: {e}")
        raise ValueError(f"Could not extract text from PDF: {str(e)}")


def extract_text_from_docx(file_content: bytes) -> str:
    """Extract text from a Word document (.docx), tables included."""
    try:
        from docx import Document

        doc = Document(io.BytesIO(file_content))

        text_parts = [p.text for p in doc.paragraphs if p.text.strip()]
        for table in doc.tables:
            for row in table.rows:
                row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if row_text:
                    text_parts.append(" | ".join(row_text))

        return "\n\n".join(text_parts)
    except Exception as e:
        logger.error(f"Failed to extract text from DOCX: {e}")
        raise ValueError(f"Could not extract text from Word document: {str(e)}")


def extract_text_from_txt(file_content: bytes) -> str:
    """Decode a plain text file, trying common encodings in turn."""
    for encoding in ('utf-8', 'utf-16'):
        try:
            return file_content.decode(encoding)
        except UnicodeDecodeError:
            continue
    # latin-1 maps every byte, so this cannot fail
    return file_content.decode('latin-1')


def extract_text(file_content: bytes, filename: str, content_type: Optional[str]) -> Tuple[str, Optional[str]]:
    """
    Extract syllabus text from a document file.

    Returns:
        Tuple of (extracted_text, error_message). On success the error is None;
        on failure the text is empty and the error says why.
    """
    lower_filename = (filename or "").lower()

    try:
        if lower_filename.endswith('.pdf') or content_type == 'application/pdf':
            text = extract_text_from_pdf(file_content)
        elif lower_filename.endswith('.docx') or content_type == SUPPORTED_EXTENSIONS['.docx']:
            text = extract_text_from_docx(file_content)
        elif lower_filename.endswith('.txt') or content_type == 'text/plain':
            text = extract_text_from_txt(file_content)
        else:
            return "", f"Unsupported file type: {filename}. Use PDF, DOCX or TXT; send images to OCR."
    except ValueError as e:
        return "", str(e)

    text = normalize_text(text)
    if len(text) < MIN_EXTRACTED_CHARS:
        return "", "Very little text extracted. If scanned, use JPG/PNG."

    logger.info(f"Extracted {len(text)} characters from {filename}")
    return text, None


def get_supported_extensions_display() -> str:
    """Human-readable list of supported extensions."""
    return ", ".join(sorted(SUPPORTED_EXTENSIONS.keys()))
