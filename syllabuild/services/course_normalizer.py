"""
Coerces loosely shaped model output into the canonical Course.

normalize_course never raises: anything missing or malformed is replaced by
a positional default. Quiz options are shuffled so the correct answer does
not sit in whichever slot the model favours.
"""
import random
from typing import Any, List, Optional, Protocol

from syllabuild.schemas.course import (
    MAX_KEY_POINTS,
    OPTION_COUNT,
    Course,
    FinalTest,
    Lesson,
    Question,
    Unit,
)

DEFAULT_TITLE = "Untitled Course"
DEFAULT_DESCRIPTION = "AI-generated course from the uploaded syllabus."
PLACEHOLDER_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]

# Keys rebuilt below; everything else on the top-level object is carried over
_CANONICAL_KEYS = {
    "courseTitle", "courseDescription", "units", "finalTest",
    "course_title", "course_description", "final_test",
}
_METADATA_KEYS = {"id", "createdAt", "sourceText", "created_at", "source_text"}


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int: ...


_default_rng = random.Random()


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _text(value: Any, default: str = "") -> str:
    if not value:
        return default
    return value if isinstance(value, str) else str(value)


def _normalize_lesson(raw: Any, unit_number: int, lesson_number: int) -> Lesson:
    raw = _as_dict(raw)
    content = raw.get("content")
    return Lesson(
        id=_text(raw.get("id"), f"u{unit_number}l{lesson_number}"),
        title=_text(raw.get("title"), f"Lesson {lesson_number}"),
        content=content if isinstance(content, str) else "",
        key_points=[_text(p) for p in _as_list(raw.get("keyPoints")) if p][:MAX_KEY_POINTS],
    )


def _normalize_unit(raw: Any, unit_number: int) -> Unit:
    raw = _as_dict(raw)
    return Unit(
        id=_text(raw.get("id"), f"u{unit_number}"),
        title=_text(raw.get("title"), f"Unit {unit_number}"),
        description=_text(raw.get("description")),
        lessons=[
            _normalize_lesson(lesson, unit_number, li + 1)
            for li, lesson in enumerate(_as_list(raw.get("lessons")))
        ],
    )


def _normalize_options(raw: Any) -> List[str]:
    options = [_text(o) for o in _as_list(raw)][:OPTION_COUNT]
    # Real options are kept and only the missing slots get their placeholder label
    options.extend(PLACEHOLDER_OPTIONS[len(options):])
    return options


def _normalize_correct_answer(raw: Any) -> int:
    # bool is an int subclass but never a valid answer index
    if isinstance(raw, int) and not isinstance(raw, bool) and 0 <= raw < OPTION_COUNT:
        return raw
    return 0


def shuffle_options(options: List[str], correct_answer: int, rng: RandomSource) -> tuple:
    """Fisher-Yates shuffle that tracks which slot now holds the correct option."""
    slots = list(range(len(options)))
    for i in range(len(slots) - 1, 0, -1):
        j = rng.randrange(i + 1)
        slots[i], slots[j] = slots[j], slots[i]
    return [options[s] for s in slots], slots.index(correct_answer)


def _normalize_question(raw: Any, number: int, rng: RandomSource) -> Question:
    raw = _as_dict(raw)
    options, correct = shuffle_options(
        _normalize_options(raw.get("options")),
        _normalize_correct_answer(raw.get("correctAnswer")),
        rng,
    )
    return Question(
        id=_text(raw.get("id"), f"q{number}"),
        question=_text(raw.get("question"), f"Question {number}"),
        options=options,
        correct_answer=correct,
        explanation=_text(raw.get("explanation")),
    )


def _metadata(parsed: dict) -> dict:
    """Client-assigned fields, kept only when they have a usable type."""
    meta = {}
    course_id = parsed.get("id")
    if isinstance(course_id, (int, str)) and not isinstance(course_id, bool):
        meta["id"] = course_id
    for key in ("createdAt", "sourceText"):
        if isinstance(parsed.get(key), str):
            meta[key] = parsed[key]
    return meta


def normalize_course(parsed: Any, rng: Optional[RandomSource] = None) -> Course:
    """Canonical Course for any parsed JSON value."""
    rng = rng or _default_rng
    parsed = _as_dict(parsed)

    questions = _as_list(_as_dict(parsed.get("finalTest")).get("questions"))
    extras = {
        k: v for k, v in parsed.items()
        if isinstance(k, str) and k not in _CANONICAL_KEYS and k not in _METADATA_KEYS
    }
    extras.update(_metadata(parsed))

    return Course(
        course_title=_text(parsed.get("courseTitle"), DEFAULT_TITLE),
        course_description=_text(parsed.get("courseDescription"), DEFAULT_DESCRIPTION),
        units=[_normalize_unit(u, ui + 1) for ui, u in enumerate(_as_list(parsed.get("units")))],
        final_test=FinalTest(
            questions=[_normalize_question(q, qi + 1, rng) for qi, q in enumerate(questions)]
        ),
        **extras,
    )
