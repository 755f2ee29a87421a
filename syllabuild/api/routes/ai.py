"""
AI endpoints: OCR pass-through, course generation, test analysis and
focused remediation.

Bodies are read as raw JSON objects so that wrong types come back as the
400 messages below instead of framework validation errors. Pipeline errors
propagate to the SyllabuildError handler registered in main.
"""
import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from syllabuild.core.errors import MalformedOutputError, ValidationError
from syllabuild.schemas.ai import (
    AnalysisResponse,
    CourseJsonResponse,
    CourseSettings,
    OcrResponse,
    Score,
)
from syllabuild.services.model_client import ModelClient, get_model_client
from syllabuild.workflows.course_generation import (
    analyze_test_results,
    generate_course,
    generate_focused_course,
    ocr_image,
)

logger = logging.getLogger(__name__)
router = APIRouter()


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Request body as a dict; anything else (empty, list, invalid) becomes {}."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


def _course_json(course: Dict[str, Any]) -> str:
    """Strict JSON text for the client; NaN and Infinity from the model are rejected."""
    try:
        return json.dumps(course, ensure_ascii=False, allow_nan=False)
    except ValueError as e:
        raise MalformedOutputError("Model output contained non-finite numbers.") from e


def _score(value: Any) -> Score:
    if not isinstance(value, dict):
        return Score()
    try:
        return Score.model_validate(value)
    except ValueError:
        # Unusable numbers render as "?" in the prompt
        return Score()


@router.post("/ocr-image", response_model=OcrResponse)
async def ocr_image_endpoint(
    body: Dict[str, Any] = Depends(read_json_body),
    client: ModelClient = Depends(get_model_client),
):
    """Extract the text of a base64 data-URL image with the vision model."""
    if not body.get("imageDataUrl"):
        raise ValidationError("imageDataUrl is required")

    text = await ocr_image(
        body["imageDataUrl"],
        instruction=body.get("instruction"),
        model=body.get("model"),
        client=client,
    )
    return OcrResponse(text=text)


@router.post("/generate-course", response_model=CourseJsonResponse)
async def generate_course_endpoint(
    body: Dict[str, Any] = Depends(read_json_body),
    client: ModelClient = Depends(get_model_client),
):
    """Two-pass course generation from extracted syllabus text."""
    syllabus_text = body.get("syllabusText")
    if not syllabus_text or not isinstance(syllabus_text, str):
        raise ValidationError("syllabusText (string) is required")

    settings = CourseSettings.from_payload(body.get("settings"))
    logger.info(f"Generating course from {len(syllabus_text)} characters")
    course = await generate_course(syllabus_text, settings, model=body.get("model"), client=client)
    return CourseJsonResponse(json_text=_course_json(course))


@router.post("/analyze-test", response_model=AnalysisResponse)
async def analyze_test_endpoint(
    body: Dict[str, Any] = Depends(read_json_body),
    client: ModelClient = Depends(get_model_client),
):
    """Weak areas and study recommendations for a finished test."""
    wrong = body.get("wrong")
    if not isinstance(wrong, list):
        raise ValidationError("wrong must be an array")

    text = await analyze_test_results(
        body.get("courseTitle"),
        _score(body.get("score")),
        wrong,
        model=body.get("model"),
        client=client,
    )
    return AnalysisResponse(text=text)


@router.post("/focused-course", response_model=CourseJsonResponse)
async def focused_course_endpoint(
    body: Dict[str, Any] = Depends(read_json_body),
    client: ModelClient = Depends(get_model_client),
):
    """Single-pass remediation course built around the wrong answers."""
    course = await generate_focused_course(
        body.get("originalCourse"),
        body.get("wrongAnswers"),
        prior_analysis=body.get("priorAnalysis") or None,
        source_text=body.get("sourceText") if isinstance(body.get("sourceText"), str) else None,
        settings=CourseSettings.from_payload(body.get("settings")),
        model=body.get("model"),
        client=client,
    )
    return CourseJsonResponse(json_text=_course_json(course))
