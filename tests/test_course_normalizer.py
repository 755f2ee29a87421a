"""
Tests for course normalization.

Covers:
1. Defaults for missing or malformed fields
2. Option padding/truncation and correctAnswer range checks
3. Shuffle keeps the correct option reachable through correctAnswer
4. Idempotence
"""
import random

import pytest

from syllabuild.services.course_normalizer import (
    DEFAULT_DESCRIPTION,
    DEFAULT_TITLE,
    normalize_course,
    shuffle_options,
)
from tests.fakes import IdentityRandom, sample_course_body, sample_quiz


class TestDefaults:
    @pytest.mark.parametrize("parsed", [{}, None, [], "text", 7, {"units": None, "finalTest": None}])
    def test_never_raises_and_has_empty_collections(self, parsed):
        course = normalize_course(parsed)
        assert course.units == []
        assert course.final_test.questions == []
        assert course.course_title == DEFAULT_TITLE
        assert course.course_description == DEFAULT_DESCRIPTION

    def test_positional_ids_and_titles(self):
        course = normalize_course({
            "units": [{}, {"lessons": [{}, {"title": "Named"}]}, "garbage"],
        })
        assert [u.id for u in course.units] == ["u1", "u2", "u3"]
        assert [u.title for u in course.units] == ["Unit 1", "Unit 2", "Unit 3"]
        lessons = course.units[1].lessons
        assert [l.id for l in lessons] == ["u2l1", "u2l2"]
        assert [l.title for l in lessons] == ["Lesson 1", "Named"]

    def test_lesson_content_and_key_points(self):
        course = normalize_course({
            "units": [{
                "lessons": [{
                    "content": {"not": "a string"},
                    "keyPoints": ["a", "", None, "b"] + [f"k{i}" for i in range(20)],
                }]
            }]
        })
        lesson = course.units[0].lessons[0]
        assert lesson.content == ""
        assert lesson.key_points[:2] == ["a", "b"]
        assert len(lesson.key_points) == 10
        assert all(lesson.key_points)

    def test_client_metadata_is_preserved(self):
        course = normalize_course({"id": 1700000000000, "createdAt": "2026-10-18", "sourceText": "syllabus"})
        assert course.id == 1700000000000
        assert course.created_at == "2026-10-18"
        assert course.source_text == "syllabus"

    def test_unusable_metadata_is_dropped(self):
        course = normalize_course({"id": {"nested": True}, "createdAt": 5})
        assert course.id is None
        assert course.created_at is None


class TestQuestions:
    def test_short_options_are_padded_with_placeholders(self):
        course = normalize_course(
            {"finalTest": {"questions": [{"question": "Q?", "options": ["Yes", "No"], "correctAnswer": 1}]}},
            rng=IdentityRandom(),
        )
        q = course.final_test.questions[0]
        assert q.options == ["Yes", "No", "Option C", "Option D"]
        assert q.options[q.correct_answer] == "No"

    def test_missing_options_become_all_placeholders(self):
        course = normalize_course({"finalTest": {"questions": [{}]}}, rng=IdentityRandom())
        q = course.final_test.questions[0]
        assert q.id == "q1"
        assert q.question == "Question 1"
        assert q.options == ["Option A", "Option B", "Option C", "Option D"]
        assert q.correct_answer == 0

    def test_extra_options_are_truncated(self):
        course = normalize_course(
            {"finalTest": {"questions": [{"options": list("ABCDEF"), "correctAnswer": 2}]}},
            rng=IdentityRandom(),
        )
        q = course.final_test.questions[0]
        assert q.options == ["A", "B", "C", "D"]
        assert q.correct_answer == 2

    @pytest.mark.parametrize("answer", [-1, 4, 1.5, "2", True, None])
    def test_invalid_correct_answer_defaults_to_zero(self, answer):
        course = normalize_course(
            {"finalTest": {"questions": [{"options": ["A", "B", "C", "D"], "correctAnswer": answer}]}},
            rng=IdentityRandom(),
        )
        q = course.final_test.questions[0]
        assert q.correct_answer == 0
        assert q.options[0] == "A"

    def test_shuffle_tracks_correct_option(self):
        rng = random.Random(1234)
        raw = sample_quiz(count=30)
        course = normalize_course(raw, rng=rng)
        for before, after in zip(raw["finalTest"]["questions"], course.final_test.questions):
            correct_text = before["options"][before["correctAnswer"]]
            assert len(after.options) == 4
            assert sorted(after.options) == sorted(before["options"])
            assert after.options.count(correct_text) == 1
            assert after.options[after.correct_answer] == correct_text
            assert 0 <= after.correct_answer <= 3

    def test_shuffle_moves_answers_off_slot_zero(self):
        course = normalize_course(sample_quiz(count=40), rng=random.Random(7))
        slots = {q.correct_answer for q in course.final_test.questions}
        assert len(slots) > 1

    def test_shuffle_options_with_stub_source(self):
        class AlwaysZero:
            def randrange(self, stop):
                return 0

        options, correct = shuffle_options(["a", "b", "c", "d"], 3, AlwaysZero())
        assert sorted(options) == ["a", "b", "c", "d"]
        assert options[correct] == "d"


class TestIdempotence:
    def test_normalize_twice_equals_once(self):
        raw = {**sample_course_body(), **sample_quiz(count=5), "extraField": "kept"}
        once = normalize_course(raw, rng=IdentityRandom()).to_payload()
        twice = normalize_course(once, rng=IdentityRandom()).to_payload()
        assert twice == once
        assert once["extraField"] == "kept"

    def test_normalize_twice_with_random_shuffle_keeps_answers(self):
        raw = {**sample_course_body(), **sample_quiz(count=10)}
        once = normalize_course(raw, rng=random.Random(3))
        twice = normalize_course(once.to_payload(), rng=random.Random(4))
        assert twice.units == once.units
        for a, b in zip(once.final_test.questions, twice.final_test.questions):
            assert sorted(a.options) == sorted(b.options)
            assert a.options[a.correct_answer] == b.options[b.correct_answer]
