"""Canonical course shape produced by normalization."""

from typing import List, Optional, Union

from pydantic import ConfigDict, Field

from syllabuild.schemas.base import CamelSchema

OPTION_COUNT = 4
MAX_KEY_POINTS = 10


class Lesson(CamelSchema):
    id: str
    title: str
    content: str = ""
    key_points: List[str] = Field(default_factory=list)


class Unit(CamelSchema):
    id: str
    title: str
    description: str = ""
    lessons: List[Lesson] = Field(default_factory=list)


class Question(CamelSchema):
    id: str
    question: str
    options: List[str]
    correct_answer: int = Field(0, ge=0, le=OPTION_COUNT - 1)
    explanation: str = ""


class FinalTest(CamelSchema):
    questions: List[Question] = Field(default_factory=list)


class Course(CamelSchema):
    # Keys the model adds beyond the schema are kept as-is
    model_config = ConfigDict(extra="allow")

    course_title: str
    course_description: str
    units: List[Unit] = Field(default_factory=list)
    final_test: FinalTest = Field(default_factory=FinalTest)

    # Assigned by the client when the course is saved, never by the pipeline
    id: Optional[Union[int, str]] = None
    created_at: Optional[str] = None
    source_text: Optional[str] = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
