import pytest

from syllabuild.client import (
    ANALYSIS_UNAVAILABLE,
    FOCUSED_SUFFIX,
    SyllabuildClient,
)
from syllabuild.core.errors import UpstreamError, ValidationError
from syllabuild.schemas.ai import WrongAnswer
from syllabuild.services.state_store import SignUp, StateStore
from tests.fakes import IdentityRandom, sample_course_body, sample_quiz

SYLLABUS = ("Week 1: Sampling and bias. Week 2: Distributions. Week 3: Hypothesis testing. " * 70)[:5000]


@pytest.fixture
def store(tmp_path):
    store = StateStore(str(tmp_path / "state.json"))
    store.dispatch(SignUp(name="Ada", email="ada@example.com", password="Passw0rd!", confirm_password="Passw0rd!"))
    return store


@pytest.fixture
def client(api_client, store):
    return SyllabuildClient(http=api_client, store=store, rng=IdentityRandom())


def messy_quiz(count):
    quiz = sample_quiz(count)
    questions = quiz["finalTest"]["questions"]
    questions[0]["options"] = ["Only one"]
    questions[1]["correctAnswer"] = 7
    questions[2]["options"] = ["a", "b", "c", "d", "e", "f"]
    questions[3] = "garbage"
    return quiz


class TestCreateCourse:
    def test_end_to_end(self, client, store, fake_model):
        fake_model.outputs.extend([sample_course_body(units=3), messy_quiz(20)])

        course = client.create_course_from_text(SYLLABUS)

        assert len(SYLLABUS) == 5000
        assert course.course_title == "Intro to Statistics"
        assert len(course.units) == 3
        questions = course.final_test.questions
        assert 0 < len(questions) <= 20
        for question in questions:
            assert len(question.options) == 4
            assert 0 <= question.correct_answer <= 3
        assert questions[0].options == ["Only one", "Option B", "Option C", "Option D"]
        assert questions[3].question == "Question 4"

        assert isinstance(course.id, int)
        assert course.created_at
        assert course.source_text == SYLLABUS
        assert store.my_courses() == [course]

        settings_in_prompt = fake_model.calls[0]["input"]
        assert "450+ words" in settings_in_prompt
        assert "Create exactly 20 MCQs" in fake_model.calls[1]["input"]

    def test_rejects_short_text(self, client, fake_model):
        with pytest.raises(ValidationError, match="too short"):
            client.create_course_from_text("Week 1: intro")
        assert fake_model.calls == []

    def test_server_error_surfaces(self, client, fake_model):
        fake_model.outputs.append(UpstreamError("Rate limit reached"))
        with pytest.raises(UpstreamError, match="Rate limit reached"):
            client.create_course_from_text(SYLLABUS)

    def test_not_stored_when_signed_out(self, api_client, tmp_path, fake_model):
        store = StateStore(str(tmp_path / "state.json"))
        client = SyllabuildClient(http=api_client, store=store, rng=IdentityRandom())
        fake_model.outputs.extend([sample_course_body(), sample_quiz()])

        client.create_course_from_text(SYLLABUS)
        assert store.my_courses() == []


class TestSubmitTest:
    def make_course(self, client, fake_model):
        fake_model.outputs.extend([sample_course_body(), sample_quiz(count=2)])
        return client.create_course_from_text(SYLLABUS)

    def test_perfect_score_skips_analysis(self, client, fake_model):
        course = self.make_course(client, fake_model)
        report = client.submit_test(course, {0: 0, 1: 0})

        assert report.result.score.pct == 100
        assert report.analysis == ""
        assert len(fake_model.calls) == 2

    def test_wrong_answers_get_analysis(self, client, fake_model):
        course = self.make_course(client, fake_model)
        fake_model.outputs.append("Review topic 2.")

        report = client.submit_test(course, {0: 0, 1: 2})

        assert report.result.score.pct == 50
        assert report.result.wrong[0].your_answer == "Wrong 2b"
        assert report.analysis == "Review topic 2."
        assert '"yourAnswer": "Wrong 2b"' in fake_model.calls[2]["input"]

    def test_analysis_failure_keeps_score(self, client, fake_model):
        course = self.make_course(client, fake_model)
        fake_model.outputs.append(UpstreamError("Rate limit reached"))

        report = client.submit_test(course, {})

        assert report.result.score.correct == 0
        assert report.analysis == ANALYSIS_UNAVAILABLE


class TestFocusedCourse:
    def make_course(self, client, fake_model):
        fake_model.outputs.extend([sample_course_body(), sample_quiz(count=2)])
        return client.create_course_from_text(SYLLABUS)

    def test_title_gets_suffix(self, client, store, fake_model):
        course = self.make_course(client, fake_model)
        wrong = [WrongAnswer(question="Q1", your_answer="A", correct_answer="B")]
        focused_body = dict(sample_course_body(units=1), **sample_quiz(count=3))
        focused_body["courseTitle"] = "Statistics Remediation"
        fake_model.outputs.append(focused_body)

        focused = client.create_focused_course(course, wrong, prior_analysis="Weak on variance")

        assert focused.course_title == "Statistics Remediation" + FOCUSED_SUFFIX
        assert len(focused.final_test.questions) == 3
        assert focused.source_text == SYLLABUS
        assert store.my_courses()[-1].course_title == focused.course_title

        prompt = fake_model.calls[-1]["input"]
        assert "Weak on variance" in prompt
        assert "Create 18 MCQs" in prompt

    def test_untitled_output_keeps_original_title(self, client, fake_model):
        course = self.make_course(client, fake_model)
        fake_model.outputs.append({"units": [], "finalTest": {"questions": []}})

        focused = client.create_focused_course(
            course, [WrongAnswer(question="Q1", your_answer="A", correct_answer="B")]
        )
        assert focused.course_title == "Intro to Statistics (Focused Review)"

    def test_requires_wrong_answers(self, client, fake_model):
        course = self.make_course(client, fake_model)
        with pytest.raises(ValidationError):
            client.create_focused_course(course, [])


class TestExtraction:
    def test_document_text(self, client):
        text = client.extract_document_text("syllabus.txt", SYLLABUS.encode("utf-8"), "text/plain")
        assert text == SYLLABUS.strip()

    def test_image_text(self, client, fake_model):
        fake_model.outputs.append("Week 1\r\n\n\n\nWeek 2   topics")
        assert client.extract_image_text(b"\x89PNG") == "Week 1\n\nWeek 2 topics"
        assert fake_model.calls[0]["input"][0]["content"][1]["image_url"].startswith("data:image/png;base64,")
