"""Domain models for the quiz application."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar
from uuid import uuid4


class QuestionType(str, Enum):
    """Question variants a quiz can contain."""

    MULTIPLE_CHOICE = "multiple-choice"
    FILL_IN_BLANKS = "fill-in-blanks"
    SEQUENCE_ARRANGEMENT = "sequence-arrangement"


def new_id() -> str:
    return str(uuid4())


@dataclass(slots=True)
class Option:
    """One selectable answer of a multiple-choice question."""

    id: str
    text: str = ""
    is_correct: bool = False


@dataclass(slots=True)
class BlankItem:
    """Ground truth for one blank; compared trimmed and case-insensitively."""

    id: str
    answer: str = ""


@dataclass(slots=True)
class SequenceItem:
    """An item to arrange; ``correct_position`` is a 1-based rank."""

    id: str
    text: str = ""
    correct_position: int = 1


@dataclass(slots=True)
class QuestionImage:
    """Image shown with a question: a public URL or a base64 data URL."""

    data: str
    name: str
    path: str | None = None  # blob path, only set when the image was uploaded


@dataclass(slots=True)
class MultipleChoiceQuestion:
    id: str
    text: str = ""
    options: list[Option] = field(default_factory=list)
    is_multiple_answer: bool = False
    code_snippet: str | None = None
    image: QuestionImage | None = None

    type: ClassVar[QuestionType] = QuestionType.MULTIPLE_CHOICE

    def correct_option_ids(self) -> set[str]:
        return {option.id for option in self.options if option.is_correct}


@dataclass(slots=True)
class FillInBlanksQuestion:
    id: str
    text: str = ""
    blanks: list[BlankItem] = field(default_factory=list)
    code_snippet: str | None = None
    image: QuestionImage | None = None

    type: ClassVar[QuestionType] = QuestionType.FILL_IN_BLANKS


@dataclass(slots=True)
class SequenceQuestion:
    id: str
    text: str = ""
    sequence_items: list[SequenceItem] = field(default_factory=list)
    pre_filled_positions: list[int] = field(default_factory=list)
    code_snippet: str | None = None
    image: QuestionImage | None = None

    type: ClassVar[QuestionType] = QuestionType.SEQUENCE_ARRANGEMENT

    def is_pre_filled(self, item: SequenceItem) -> bool:
        return item.correct_position in self.pre_filled_positions


Question = MultipleChoiceQuestion | FillInBlanksQuestion | SequenceQuestion

QUESTION_CLASSES: dict[QuestionType, type] = {
    QuestionType.MULTIPLE_CHOICE: MultipleChoiceQuestion,
    QuestionType.FILL_IN_BLANKS: FillInBlanksQuestion,
    QuestionType.SEQUENCE_ARRANGEMENT: SequenceQuestion,
}


def empty_question(
    question_type: QuestionType,
    question_id: str | None = None,
    text: str = "",
    code_snippet: str | None = None,
    image: QuestionImage | None = None,
) -> Question:
    """Build a question of ``question_type`` with an empty variant body."""
    question_class = QUESTION_CLASSES[QuestionType(question_type)]
    return question_class(
        id=question_id or new_id(),
        text=text,
        code_snippet=code_snippet,
        image=copy.copy(image),
    )


@dataclass(slots=True)
class Quiz:
    """A named, optionally password-protected collection of ordered questions."""

    id: str
    title: str
    questions: list[Question] = field(default_factory=list)
    password: str | None = None

    @property
    def is_locked(self) -> bool:
        return bool(self.password)

    def find_question(self, question_id: str) -> Question | None:
        return next((q for q in self.questions if q.id == question_id), None)


@dataclass(slots=True)
class UserAnswer:
    """Responses recorded for one question during a quiz-taking session."""

    question_id: str
    selected_option_ids: list[str] = field(default_factory=list)
    blank_answers: dict[str, str] = field(default_factory=dict)
    sequence_positions: dict[str, int] = field(default_factory=dict)


def copy_question(question: Question) -> Question:
    return copy.deepcopy(question)


def copy_quiz(quiz: Quiz) -> Quiz:
    """Return a deep copy so callers never share sub-items with the original."""
    return copy.deepcopy(quiz)
