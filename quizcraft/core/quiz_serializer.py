"""Conversion between quiz models and stored records.

Record format (one JSON object per quiz, keys as stored in the ``quizzes``
table):

    {
      "id": "...", "title": "...", "password": "optional",
      "questions": [
        {"id": "...", "text": "...", "type": "multiple-choice",
         "options": [{"id": "...", "text": "...", "isCorrect": true}],
         "isMultipleAnswer": false,
         "codeSnippet": "optional", "image": {"data": "...", "name": "...", "path": "..."}},
        {"type": "fill-in-blanks", "blanks": [{"id": "...", "answer": "Paris"}], ...},
        {"type": "sequence-arrangement",
         "sequenceItems": [{"id": "...", "text": "...", "correctPosition": 1}],
         "preFilledPositions": [2], ...}
      ]
    }

Reading only picks up the fields owned by the question's type, so a record
carrying leftovers from another variant loads as a clean question.

The same format is used for the local cache file, which holds a JSON list of
quiz records.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from quizcraft.core.models import (
    BlankItem,
    FillInBlanksQuestion,
    MultipleChoiceQuestion,
    Option,
    Question,
    QuestionImage,
    QuestionType,
    Quiz,
    SequenceItem,
    SequenceQuestion,
)


class QuizFormatError(Exception):
    """Raised when a stored quiz record cannot be parsed."""


def quiz_to_record(quiz: Quiz) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": quiz.id,
        "title": quiz.title,
        "questions": [_question_to_record(question) for question in quiz.questions],
    }
    if quiz.password:
        record["password"] = quiz.password
    return record


def _question_to_record(question: Question) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": question.id,
        "text": question.text,
        "type": question.type.value,
        "options": [],
        "isMultipleAnswer": False,
    }
    if isinstance(question, MultipleChoiceQuestion):
        record["options"] = [
            {"id": option.id, "text": option.text, "isCorrect": option.is_correct}
            for option in question.options
        ]
        record["isMultipleAnswer"] = question.is_multiple_answer
    elif isinstance(question, FillInBlanksQuestion):
        record["blanks"] = [{"id": blank.id, "answer": blank.answer} for blank in question.blanks]
    elif isinstance(question, SequenceQuestion):
        record["sequenceItems"] = [
            {"id": item.id, "text": item.text, "correctPosition": item.correct_position}
            for item in question.sequence_items
        ]
        record["preFilledPositions"] = list(question.pre_filled_positions)

    if question.code_snippet:
        record["codeSnippet"] = question.code_snippet
    if question.image is not None:
        image: dict[str, Any] = {"data": question.image.data, "name": question.image.name}
        if question.image.path:
            image["path"] = question.image.path
        record["image"] = image
    return record


def quiz_from_record(record: Any) -> Quiz:
    if not isinstance(record, dict):
        raise QuizFormatError("Quiz record must be an object.")
    quiz_id = record.get("id")
    if not quiz_id:
        raise QuizFormatError("Quiz record is missing its id.")
    questions = record.get("questions") or []
    if not isinstance(questions, list):
        raise QuizFormatError(f"Quiz {quiz_id} has a malformed question list.")
    return Quiz(
        id=str(quiz_id),
        title=str(record.get("title") or ""),
        questions=[_question_from_record(item) for item in questions],
        password=record.get("password") or None,
    )


def _question_from_record(record: Any) -> Question:
    if not isinstance(record, dict):
        raise QuizFormatError("Question record must be an object.")
    raw_type = record.get("type") or QuestionType.MULTIPLE_CHOICE.value
    try:
        question_type = QuestionType(raw_type)
    except ValueError as exc:
        raise QuizFormatError(f"Unknown question type '{raw_type}'.") from exc

    question_id = record.get("id")
    if not question_id:
        raise QuizFormatError("Question record is missing its id.")
    common = {
        "id": str(question_id),
        "text": str(record.get("text") or ""),
        "code_snippet": record.get("codeSnippet") or None,
        "image": _image_from_record(record.get("image")),
    }

    try:
        if question_type is QuestionType.MULTIPLE_CHOICE:
            return MultipleChoiceQuestion(
                options=[
                    Option(id=str(o["id"]), text=str(o.get("text", "")), is_correct=bool(o.get("isCorrect")))
                    for o in record.get("options") or []
                ],
                is_multiple_answer=bool(record.get("isMultipleAnswer")),
                **common,
            )
        if question_type is QuestionType.FILL_IN_BLANKS:
            return FillInBlanksQuestion(
                blanks=[
                    BlankItem(id=str(b["id"]), answer=str(b.get("answer", "")))
                    for b in record.get("blanks") or []
                ],
                **common,
            )
        return SequenceQuestion(
            sequence_items=[
                SequenceItem(
                    id=str(s["id"]),
                    text=str(s.get("text", "")),
                    correct_position=int(s.get("correctPosition", 0)),
                )
                for s in record.get("sequenceItems") or []
            ],
            pre_filled_positions=[int(p) for p in record.get("preFilledPositions") or []],
            **common,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise QuizFormatError(f"Question {question_id} has malformed items: {exc}") from exc


def _image_from_record(record: Any) -> QuestionImage | None:
    if not record:
        return None
    if not isinstance(record, dict) or not record.get("data"):
        raise QuizFormatError("Question image must include its data.")
    return QuestionImage(
        data=str(record["data"]),
        name=str(record.get("name") or "image"),
        path=record.get("path") or None,
    )


def save_quizzes_to_file(file_path: Path, quizzes: list[Quiz]) -> None:
    """Persist the quiz collection to the local cache file."""
    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    document = json.dumps([quiz_to_record(quiz) for quiz in quizzes], indent=2)
    file_path.write_text(document + "\n", encoding="utf-8")


def load_quizzes_from_file(file_path: Path) -> list[Quiz]:
    """Read the local cache file; a missing file is an empty collection."""
    if not file_path.exists():
        return []
    try:
        payload = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise QuizFormatError(f"Local quiz cache {file_path} is not valid JSON.") from exc
    if not isinstance(payload, list):
        raise QuizFormatError("Local quiz cache must contain a list of quizzes.")
    return [quiz_from_record(record) for record in payload]
