import logging

from fastapi import APIRouter, File, UploadFile

from syllabuild.core.errors import ValidationError
from syllabuild.schemas.ai import ExtractedDocumentResponse
from syllabuild.services.document_extractor import (
    extract_text,
    get_supported_extensions_display,
    is_supported_document,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/extract", response_model=ExtractedDocumentResponse)
async def extract_document_text(file: UploadFile = File(...)):
    """Extract syllabus text from an uploaded PDF, DOCX or TXT file."""
    filename = file.filename or ""
    if not is_supported_document(filename, file.content_type):
        raise ValidationError(
            f"Unsupported file type. Supported: {get_supported_extensions_display()}. "
            "Send JPG/PNG images to /api/ai/ocr-image."
        )

    content = await file.read()
    text, error = extract_text(content, filename, file.content_type)
    if error:
        logger.warning(f"Extraction failed for {filename}: {error}")
        raise ValidationError(error)

    return ExtractedDocumentResponse(text=text, filename=filename, characters=len(text))
