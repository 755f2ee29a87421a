"""
Course Generation Workflow: Syllabus -> Course + Final Test

Full generation runs two passes against the model:
    CourseBody (units/lessons, no quiz) -> Outline -> Quiz -> Merge

Splitting keeps each response under its own output-token ceiling; a single
request for word-heavy lessons plus a full quiz tends to come back truncated.
Focused remediation runs one pass that returns course and quiz together.

Any failing step aborts the whole flow. Nothing partial is returned and
nothing is retried.
"""
import logging
from typing import Any, Dict, List, Optional

from syllabuild.core.config import get_settings
from syllabuild.core.errors import GenerationError, ValidationError
from syllabuild.core.logger import log_step
from syllabuild.schemas.ai import CourseSettings, Score
from syllabuild.services.json_extraction import parse_json_leniently
from syllabuild.services.model_client import ModelClient, PromptPayload, extract_text
from syllabuild.workflows.prompts.course_prompts import (
    build_analysis_prompt,
    build_course_only_prompt,
    build_focused_prompt,
    build_quiz_only_prompt,
    truncate_source,
)

logger = logging.getLogger(__name__)

# Output-token ceilings per pass
COURSE_PASS_MAX_TOKENS = 12000
QUIZ_PASS_MAX_TOKENS = 5000
FOCUSED_PASS_MAX_TOKENS = 15000
ANALYSIS_MAX_TOKENS = 900
OCR_MAX_TOKENS = 4000

DEFAULT_OCR_INSTRUCTION = "OCR this image and extract ALL visible text verbatim. Return only raw text."


async def _run_pass(
    client: ModelClient,
    model: str,
    prompt: PromptPayload,
    max_output_tokens: int,
    wants_json_object: bool,
) -> str:
    data = await client.invoke(
        model=model,
        input=prompt,
        max_output_tokens=max_output_tokens,
        wants_json_object=wants_json_object,
    )
    return extract_text(data)


async def _run_json_pass(client: ModelClient, model: str, prompt: str, max_output_tokens: int) -> Dict[str, Any]:
    parsed = parse_json_leniently(await _run_pass(client, model, prompt, max_output_tokens, True))
    if not isinstance(parsed, dict):
        raise GenerationError("Model output was JSON but not an object.")
    return parsed


def build_quiz_outline(course_obj: Dict[str, Any]) -> Dict[str, Any]:
    """Titles and ids only, so the quiz prompt stays small."""
    units = course_obj.get("units")
    outline_units = []
    for unit in units if isinstance(units, list) else []:
        if not isinstance(unit, dict):
            continue
        lessons = unit.get("lessons")
        outline_units.append({
            "id": unit.get("id"),
            "title": unit.get("title"),
            "lessons": [
                {"id": lesson.get("id"), "title": lesson.get("title")}
                for lesson in (lessons if isinstance(lessons, list) else [])
                if isinstance(lesson, dict)
            ],
        })
    return {"courseTitle": course_obj.get("courseTitle"), "units": outline_units}


def build_remediation_outline(original_course: Dict[str, Any]) -> Dict[str, Any]:
    """Title, description and unit/lesson headings; lesson bodies are dropped."""
    outline = build_quiz_outline(original_course)
    outline["courseDescription"] = original_course.get("courseDescription")
    units = original_course.get("units")
    units = [u for u in units if isinstance(u, dict)] if isinstance(units, list) else []
    for entry, unit in zip(outline["units"], units):
        entry["description"] = unit.get("description")
    return outline


async def generate_course(
    syllabus_text: str,
    settings: Optional[CourseSettings] = None,
    model: Optional[str] = None,
    client: Optional[ModelClient] = None,
) -> Dict[str, Any]:
    """Two-pass generation. Returns the raw merged course object (not normalized)."""
    client = client or ModelClient()
    model = model or get_settings().openai_model
    settings = settings or CourseSettings()
    trimmed = truncate_source(syllabus_text)

    # Pass 1: course body, no quiz
    log_step(f"Pass 1: generating course body from {len(trimmed)} characters of syllabus")
    course_obj = await _run_json_pass(
        client, model, build_course_only_prompt(trimmed, settings), COURSE_PASS_MAX_TOKENS
    )
    if not isinstance(course_obj.get("units"), list):
        raise GenerationError("Course pass returned no units.")

    # Pass 2: quiz over the outline only
    outline = build_quiz_outline(course_obj)
    log_step(f"Pass 2: generating final test for {len(outline['units'])} units")
    quiz_obj = await _run_json_pass(
        client, model, build_quiz_only_prompt(outline, settings), QUIZ_PASS_MAX_TOKENS
    )

    # Question count is not checked here; normalization handles shape
    final_test = quiz_obj.get("finalTest")
    course_obj["finalTest"] = final_test
    questions = final_test.get("questions") if isinstance(final_test, dict) else None
    logger.info(
        f"Merged course: {len(course_obj['units'])} units, "
        f"{len(questions) if isinstance(questions, list) else 0} questions"
    )
    log_step("Course and final test merged")
    return course_obj


async def generate_focused_course(
    original_course: Optional[Dict[str, Any]],
    wrong_answers: Optional[List[Any]],
    prior_analysis: Optional[str] = None,
    source_text: Optional[str] = None,
    settings: Optional[CourseSettings] = None,
    model: Optional[str] = None,
    client: Optional[ModelClient] = None,
) -> Dict[str, Any]:
    """Single-pass remediation course (with quiz) targeting the wrong answers."""
    if not original_course:
        raise ValidationError("originalCourse is required")
    if not isinstance(wrong_answers, list) or not wrong_answers:
        raise ValidationError("wrongAnswers must be a non-empty array")

    client = client or ModelClient()
    model = model or get_settings().openai_model
    outline = (
        build_remediation_outline(original_course)
        if isinstance(original_course, dict)
        else original_course
    )

    log_step(f"Focused pass: remediating {len(wrong_answers)} wrong answers")
    prompt = build_focused_prompt(outline, wrong_answers, prior_analysis, source_text, settings)
    course_obj = await _run_json_pass(client, model, prompt, FOCUSED_PASS_MAX_TOKENS)
    log_step("Focused course generated")
    return course_obj


async def analyze_test_results(
    course_title: Optional[str],
    score: Optional[Score],
    wrong_answers: List[Any],
    model: Optional[str] = None,
    client: Optional[ModelClient] = None,
) -> str:
    """Free-text weak-area analysis for a finished test."""
    if not isinstance(wrong_answers, list):
        raise ValidationError("wrong must be an array")

    client = client or ModelClient()
    model = model or get_settings().openai_model
    prompt = build_analysis_prompt(course_title, score, wrong_answers)
    return await _run_pass(client, model, prompt, ANALYSIS_MAX_TOKENS, False)


async def ocr_image(
    image_data_url: str,
    instruction: Optional[str] = None,
    model: Optional[str] = None,
    client: Optional[ModelClient] = None,
) -> str:
    """Pass an image straight to the vision model and return its text."""
    if not image_data_url:
        raise ValidationError("imageDataUrl is required")

    client = client or ModelClient()
    model = model or get_settings().openai_vision_model
    message = [{
        "role": "user",
        "content": [
            {"type": "input_text", "text": instruction or DEFAULT_OCR_INSTRUCTION},
            {"type": "input_image", "image_url": image_data_url},
        ],
    }]
    return await _run_pass(client, model, message, OCR_MAX_TOKENS, False)
