"""Request/response bodies for the AI endpoints."""

from typing import Any, List, Optional, Union

from pydantic import ConfigDict
from pydantic import ValidationError as PydanticValidationError

from syllabuild.core.errors import ValidationError
from syllabuild.schemas.base import CamelSchema

Number = Union[int, float]


class CourseSettings(CamelSchema):
    minimum_lesson_words: Optional[int] = None
    quiz_count_target: Optional[int] = None

    @classmethod
    def from_payload(cls, value: Any) -> "CourseSettings":
        """Build settings from an untrusted request value; non-objects mean defaults."""
        if not isinstance(value, dict):
            return cls()
        try:
            return cls.model_validate(value)
        except PydanticValidationError as e:
            raise ValidationError(
                "settings.minimumLessonWords and settings.quizCountTarget must be integers"
            ) from e


class Score(CamelSchema):
    pct: Optional[Number] = None
    correct: Optional[Number] = None
    total: Optional[Number] = None


class WrongAnswer(CamelSchema):
    model_config = ConfigDict(extra="allow")

    question: str
    your_answer: str
    correct_answer: str
    explanation: str = ""


class GradedTest(CamelSchema):
    score: Score
    wrong: List[WrongAnswer]


class OcrResponse(CamelSchema):
    text: str


class AnalysisResponse(CamelSchema):
    text: str


class CourseJsonResponse(CamelSchema):
    json_text: str


class ExtractedDocumentResponse(CamelSchema):
    text: str
    filename: str
    characters: int


class ErrorResponse(CamelSchema):
    error: str


class HealthResponse(CamelSchema):
    ok: bool
    env: str
    time: str

