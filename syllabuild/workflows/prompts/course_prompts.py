"""
Prompts for the course generation workflow.

Course body and quiz are requested in separate passes so neither response
runs into the output-token ceiling.
"""
import json
from typing import Any, Optional

from syllabuild.schemas.ai import CourseSettings, Score

# Syllabus text beyond this many characters is cut before embedding
MAX_SOURCE_CHARS = 24000

DEFAULT_MIN_LESSON_WORDS = 300
DEFAULT_QUIZ_COUNT = 20
DEFAULT_FOCUSED_QUIZ_COUNT = 18


COURSE_ONLY_PROMPT = """You are an expert curriculum designer. Create a comprehensive, detailed course from the syllabus below.

Return ONLY a valid JSON object (no markdown fences) with this EXACT structure (NO finalTest in this step):
{{
  "courseTitle": "string",
  "courseDescription": "string (2-3 sentences)",
  "units": [
    {{
      "id": "u1",
      "title": "Unit 1: Title",
      "description": "string",
      "lessons": [
        {{
          "id": "u1l1",
          "title": "string",
          "content": "Thorough lesson content, minimum {min_words} words. Include explanations, examples, and elaboration.",
          "keyPoints": ["string","string","string","string"]
        }}
      ]
    }}
  ]
}}

Rules:
- Cover ALL major topics from the syllabus. Do NOT skip sections.
- Create as many units and lessons as needed for full coverage, but keep content tight and high-signal.
- Each lesson content must be {min_words}+ words with examples.
- Return ONLY the JSON, nothing else.

SYLLABUS:
{syllabus_text}"""


QUIZ_ONLY_PROMPT = """You are an expert examiner. Create a final test for the course outline below.

Return ONLY a valid JSON object (no markdown fences) with this EXACT structure:
{{
  "finalTest": {{
    "questions": [
      {{
        "id": "q1",
        "question": "string",
        "options": ["Option A text","Option B text","Option C text","Option D text"],
        "correctAnswer": 0,
        "explanation": "string"
      }}
    ]
  }}
}}

Rules:
- Create exactly {quiz_count} MCQs covering ALL units and lessons.
- Questions must test understanding and application, not just recall.
- correctAnswer is 0-indexed (0=A,1=B,2=C,3=D)
- IMPORTANT: Distribute correct answers across A/B/C/D (avoid bias).
- Return ONLY JSON, nothing else.

COURSE OUTLINE:
{course_outline}"""


ANALYSIS_PROMPT = """A student finished "{course_title}" scoring {pct}% ({correct}/{total}).
Incorrect answers (JSON):
{wrong_answers}

Provide:
1) Main weak areas/topics (bullet list)
2) Specific study recommendations for each weak area (bullet list)
3) A short encouraging closing message

Be concise and actionable (under 250 words)."""


FOCUSED_COURSE_PROMPT = """You are an expert tutor and curriculum designer.

Goal: Create a NEW course JSON focused primarily on the student's weak areas, while still including only the essential prerequisites needed to understand them.

Return ONLY a valid JSON object:
{{
  "courseTitle": "string",
  "courseDescription": "string (2-3 sentences)",
  "units": [
    {{
      "id": "u1",
      "title": "Unit 1: Title",
      "description": "string",
      "lessons": [
        {{
          "id": "u1l1",
          "title": "string",
          "content": "Minimum {min_words} words. Clear explanations + examples + practice guidance.",
          "keyPoints": ["string","string","string","string"]
        }}
      ]
    }}
  ],
  "finalTest": {{
    "questions": [
      {{
        "id": "q1",
        "question": "string",
        "options": ["Option A","Option B","Option C","Option D"],
        "correctAnswer": 0,
        "explanation": "string"
      }}
    ]
  }}
}}

Inputs:
- Original course outline:
{original_course}

- Student wrong answers:
{wrong_answers}

- Prior performance analysis:
{prior_analysis}

Rules:
- Focus heavily on weak areas revealed by wrong answers.
- Include prerequisite refreshers only when needed.
- Create as many units as needed for remediation (typical 5-10).
- Each lesson: {min_words}+ words, worked examples, and common pitfalls.
- Create {quiz_count} MCQs targeted to weak areas and application.
- Distribute correct answers across A/B/C/D.
- Return ONLY JSON.

Reference syllabus (optional):
{source_text}"""


def truncate_source(text: Optional[str]) -> str:
    return (text or "")[:MAX_SOURCE_CHARS]


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _or_default(value: Optional[int], default: int) -> int:
    return default if value is None else value


def build_course_only_prompt(syllabus_text: str, settings: Optional[CourseSettings] = None) -> str:
    """Pass 1 instructions: units and lessons, no quiz."""
    settings = settings or CourseSettings()
    return COURSE_ONLY_PROMPT.format(
        min_words=_or_default(settings.minimum_lesson_words, DEFAULT_MIN_LESSON_WORDS),
        syllabus_text=truncate_source(syllabus_text),
    )


def build_quiz_only_prompt(course_outline: dict, settings: Optional[CourseSettings] = None) -> str:
    """Pass 2 instructions: the final test for an already generated outline."""
    settings = settings or CourseSettings()
    return QUIZ_ONLY_PROMPT.format(
        quiz_count=_or_default(settings.quiz_count_target, DEFAULT_QUIZ_COUNT),
        course_outline=_dump(course_outline),
    )


def build_analysis_prompt(course_title: Optional[str], score: Optional[Score], wrong_answers: list) -> str:
    score = score or Score()

    def show(value):
        return "?" if value is None else value

    return ANALYSIS_PROMPT.format(
        course_title=course_title or "a course",
        pct=show(score.pct),
        correct=show(score.correct),
        total=show(score.total),
        wrong_answers=_dump(wrong_answers),
    )


def build_focused_prompt(
    original_course: Any,
    wrong_answers: list,
    prior_analysis: Optional[str] = None,
    source_text: Optional[str] = None,
    settings: Optional[CourseSettings] = None,
) -> str:
    """Single-pass remediation course with its own quiz."""
    settings = settings or CourseSettings()
    return FOCUSED_COURSE_PROMPT.format(
        min_words=_or_default(settings.minimum_lesson_words, DEFAULT_MIN_LESSON_WORDS),
        quiz_count=_or_default(settings.quiz_count_target, DEFAULT_FOCUSED_QUIZ_COUNT),
        original_course=_dump(original_course),
        wrong_answers=_dump(wrong_answers),
        prior_analysis=prior_analysis or "(none)",
        source_text=truncate_source(source_text),
    )
