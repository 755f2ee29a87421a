"""
Course-builder client.

Drives the service over HTTP the same way the browser UI does: extract the
syllabus text, generate and normalize a course, grade the final test, ask
for an analysis and build a focused review course from the wrong answers.
"""
import base64
import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from syllabuild.core.errors import UpstreamError, ValidationError
from syllabuild.schemas.ai import GradedTest, WrongAnswer
from syllabuild.schemas.course import Course
from syllabuild.services.course_normalizer import RandomSource, normalize_course
from syllabuild.services.document_extractor import normalize_text
from syllabuild.services.grading import grade_test
from syllabuild.services.json_extraction import parse_json_leniently
from syllabuild.services.state_store import AddCourse, StateStore
from syllabuild.workflows.course_generation import DEFAULT_OCR_INSTRUCTION

logger = logging.getLogger(__name__)

MIN_SYLLABUS_CHARS = 50
LESSON_WORDS = 450
QUIZ_COUNT = 20
FOCUSED_QUIZ_COUNT = 18
ANALYSIS_UNAVAILABLE = "Could not generate AI analysis right now."
FOCUSED_SUFFIX = " (Focused Review)"


@dataclass
class QuizReport:
    result: GradedTest
    analysis: str = ""


class SyllabuildClient:
    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        store: Optional[StateStore] = None,
        rng: Optional[RandomSource] = None,
        http: Optional[httpx.Client] = None,
        model: Optional[str] = None,
        vision_model: Optional[str] = None,
    ):
        # Generation can take minutes; no client-side deadline
        self.http = http or httpx.Client(base_url=base_url, timeout=None)
        self.store = store
        self.rng = rng
        self.model = model
        self.vision_model = vision_model

    def _post(self, path: str, body: Optional[Dict[str, Any]] = None, **kwargs) -> Dict[str, Any]:
        if body is not None:
            kwargs["json"] = body
        response = self.http.post(path, **kwargs)
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        if response.status_code >= 400:
            raise UpstreamError(
                data.get("error") or data.get("message") or f"Request failed ({response.status_code})",
                status_code=response.status_code,
            )
        return data

    def _with_model(self, body: Dict[str, Any], model: Optional[str]) -> Dict[str, Any]:
        if model:
            body["model"] = model
        return body

    def _stamp_and_store(self, course: Course, source_text: str) -> Course:
        course.id = int(time.time() * 1000)
        course.created_at = date.today().isoformat()
        course.source_text = source_text
        if self.store is not None:
            self.store.dispatch(AddCourse(course=course))
        return course

    # ---------- Syllabus text ----------

    def extract_document_text(self, filename: str, content: bytes, content_type: str) -> str:
        """Server-side PDF/DOCX/TXT extraction."""
        data = self._post(
            "/api/documents/extract",
            files={"file": (filename, content, content_type)},
        )
        return data.get("text", "")

    def extract_image_text(self, image: bytes, content_type: str = "image/png") -> str:
        """OCR through the vision model."""
        data_url = f"data:{content_type};base64,{base64.b64encode(image).decode('ascii')}"
        body = self._with_model(
            {"imageDataUrl": data_url, "instruction": DEFAULT_OCR_INSTRUCTION},
            self.vision_model,
        )
        return normalize_text(self._post("/api/ai/ocr-image", body).get("text", ""))

    # ---------- Courses ----------

    def create_course_from_text(self, syllabus_text: str) -> Course:
        """Generate, normalize, stamp and store a course."""
        if not syllabus_text or len(syllabus_text.strip()) < MIN_SYLLABUS_CHARS:
            raise ValidationError("Extracted text is too short to generate a useful course.")

        body = self._with_model({
            "syllabusText": syllabus_text,
            "settings": {"minimumLessonWords": LESSON_WORDS, "quizCountTarget": QUIZ_COUNT},
        }, self.model)
        data = self._post("/api/ai/generate-course", body)

        course = normalize_course(parse_json_leniently(data.get("jsonText") or data.get("text") or ""), self.rng)
        logger.info(
            f"Course '{course.course_title}' ready: {len(course.units)} units, "
            f"{len(course.final_test.questions)} questions"
        )
        return self._stamp_and_store(course, syllabus_text)

    def submit_test(self, course: Course, answers: Dict[int, int]) -> QuizReport:
        """Grade the final test and, when anything was missed, fetch an analysis."""
        result = grade_test(course.final_test.questions, answers)
        report = QuizReport(result=result)
        if not result.wrong:
            return report

        body = self._with_model({
            "courseTitle": course.course_title,
            "score": result.score.model_dump(),
            "wrong": [w.model_dump(by_alias=True) for w in result.wrong],
        }, self.model)
        try:
            report.analysis = self._post("/api/ai/analyze-test", body).get("text", "")
        except (UpstreamError, httpx.HTTPError) as e:
            # The score stands on its own; the analysis is optional
            logger.warning(f"Test analysis failed: {e}")
            report.analysis = ANALYSIS_UNAVAILABLE
        return report

    def create_focused_course(
        self,
        course: Course,
        wrong_answers: List[WrongAnswer],
        prior_analysis: str = "",
    ) -> Course:
        """Remediation course built from the last test's wrong answers."""
        if not wrong_answers:
            raise ValidationError("wrongAnswers must be a non-empty array")

        outline = course.model_dump(by_alias=True, include={"course_title", "course_description", "units"})
        body = self._with_model({
            "originalCourse": outline,
            "wrongAnswers": [w.model_dump(by_alias=True) for w in wrong_answers],
            "priorAnalysis": prior_analysis or "",
            "sourceText": course.source_text or "",
            "settings": {"minimumLessonWords": LESSON_WORDS, "quizCountTarget": FOCUSED_QUIZ_COUNT},
        }, self.model)
        data = self._post("/api/ai/focused-course", body)

        raw = parse_json_leniently(data.get("jsonText") or data.get("text") or "")
        focused = normalize_course(raw, self.rng)
        # Fall back to the original title, not the normalizer's placeholder
        title = (raw.get("courseTitle") if isinstance(raw, dict) else None) or course.course_title
        focused.course_title = f"{title}{FOCUSED_SUFFIX}"
        return self._stamp_and_store(focused, course.source_text or "")

    def close(self):
        self.http.close()
