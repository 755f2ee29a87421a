"""Scores a submitted final test and collects the wrong-answer records."""

from typing import Dict, List, Optional

from syllabuild.schemas.ai import GradedTest, Score, WrongAnswer
from syllabuild.schemas.course import Question

NOT_ANSWERED = "(not answered)"
MISSING_ANSWER = "(missing)"


def _option_text(question: Question, index: Optional[int], fallback: str) -> str:
    if index is None or not 0 <= index < len(question.options):
        return fallback
    return question.options[index]


def grade_test(questions: List[Question], answers: Dict[int, int]) -> GradedTest:
    """
    Grade answers keyed by question position.

    Unanswered questions count as wrong. The percentage is rounded to an
    integer; an empty test scores 0 of 0.
    """
    correct = 0
    wrong = []
    for i, question in enumerate(questions):
        chosen = answers.get(i)
        if chosen == question.correct_answer:
            correct += 1
            continue
        wrong.append(WrongAnswer(
            question=question.question,
            your_answer=_option_text(question, chosen, NOT_ANSWERED),
            correct_answer=_option_text(question, question.correct_answer, MISSING_ANSWER),
            explanation=question.explanation,
        ))

    total = len(questions)
    # Half-up rounding, so 62.5% shows as 63
    pct = int(correct * 100 / total + 0.5) if total else 0
    return GradedTest(score=Score(pct=pct, correct=correct, total=total), wrong=wrong)
