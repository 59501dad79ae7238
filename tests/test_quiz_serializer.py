import pytest

from quizcraft.core.models import QuestionImage, QuestionType
from quizcraft.core.quiz_serializer import (
    QuizFormatError,
    load_quizzes_from_file,
    quiz_from_record,
    quiz_to_record,
    save_quizzes_to_file,
)


def test_record_uses_stored_key_names(sample_quiz):
    record = quiz_to_record(sample_quiz)
    mc, blanks, sequence = record["questions"]

    assert mc["type"] == "multiple-choice"
    assert mc["isMultipleAnswer"] is True
    assert mc["options"][0] == {"id": "A", "text": "2", "isCorrect": True}
    assert blanks["blanks"] == [{"id": "b1", "answer": "Paris"}]
    assert sequence["sequenceItems"][1] == {"id": "s2", "text": "Venus", "correctPosition": 2}
    assert sequence["preFilledPositions"] == [2]
    assert "password" not in record


def test_optional_fields_are_written_when_present(sample_quiz):
    sample_quiz.password = "secret"
    question = sample_quiz.questions[0]
    question.code_snippet = "x = 1"
    question.image = QuestionImage(data="https://cdn/x.png", name="x.png", path="x.png")

    record = quiz_to_record(sample_quiz)

    assert record["password"] == "secret"
    assert record["questions"][0]["codeSnippet"] == "x = 1"
    assert record["questions"][0]["image"] == {
        "data": "https://cdn/x.png",
        "name": "x.png",
        "path": "x.png",
    }
    assert quiz_from_record(record) == sample_quiz


def test_reading_drops_fields_of_other_variants():
    record = {
        "id": "quiz",
        "title": "Mixed",
        "questions": [
            {
                "id": "q1",
                "text": "Fill",
                "type": "fill-in-blanks",
                "options": [{"id": "o", "text": "stale", "isCorrect": True}],
                "isMultipleAnswer": False,
                "blanks": [{"id": "b", "answer": "x"}],
            }
        ],
    }

    question = quiz_from_record(record).questions[0]

    assert question.type is QuestionType.FILL_IN_BLANKS
    assert not hasattr(question, "options")


def test_missing_type_defaults_to_multiple_choice():
    record = {"id": "quiz", "title": "Old", "questions": [{"id": "q1", "text": "?", "options": []}]}
    assert quiz_from_record(record).questions[0].type is QuestionType.MULTIPLE_CHOICE


@pytest.mark.parametrize(
    "record",
    [
        [],
        {"title": "no id"},
        {"id": "q", "questions": [{"id": "x", "type": "essay"}]},
        {"id": "q", "questions": [{"id": "x", "type": "sequence-arrangement", "sequenceItems": [{}]}]},
    ],
)
def test_malformed_records_raise(record):
    with pytest.raises(QuizFormatError):
        quiz_from_record(record)


def test_cache_file_round_trip(tmp_path, sample_quiz):
    cache = tmp_path / "nested" / "quiz-storage.json"
    save_quizzes_to_file(cache, [sample_quiz])
    assert load_quizzes_from_file(cache) == [sample_quiz]


def test_missing_cache_file_is_empty(tmp_path):
    assert load_quizzes_from_file(tmp_path / "absent.json") == []
