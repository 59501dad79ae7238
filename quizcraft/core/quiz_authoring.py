"""Editing model for a quiz that has not been saved yet.

A ``QuizDraft`` never mutates a question in place: every operation builds new
question values and rebinds ``draft.questions`` to a fresh list, so a draft
created from a stored quiz shares nothing with the repository's copy.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from typing import TYPE_CHECKING, Callable, Iterable

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
    copy_quiz,
    empty_question,
    new_id,
)

if TYPE_CHECKING:
    from quizcraft.core.services.quiz_repository import QuizRepository, SaveResult

logger = logging.getLogger(__name__)


class DraftError(ValueError):
    """Raised when an edit targets a missing element or the wrong question type."""


class QuizDraft:
    """Title, optional password and question list of a quiz being authored."""

    def __init__(
        self,
        title: str = "",
        password: str | None = None,
        questions: Iterable[Question] = (),
        quiz_id: str | None = None,
    ) -> None:
        self.title = title
        self.password = password
        self.questions: list[Question] = list(questions)
        self.quiz_id = quiz_id

    @classmethod
    def from_quiz(cls, quiz: Quiz) -> "QuizDraft":
        copied = copy_quiz(quiz)
        return cls(
            title=copied.title,
            password=copied.password,
            questions=copied.questions,
            quiz_id=copied.id,
        )

    @property
    def is_editing(self) -> bool:
        return self.quiz_id is not None

    def to_quiz(self) -> Quiz:
        return copy_quiz(
            Quiz(
                id=self.quiz_id or new_id(),
                title=self.title,
                questions=self.questions,
                password=self.password or None,
            )
        )

    def get_question(self, question_id: str) -> Question:
        for question in self.questions:
            if question.id == question_id:
                return question
        raise DraftError(f"Question {question_id} not found")

    def set_title(self, title: str) -> None:
        self.title = title

    def set_password(self, password: str | None) -> None:
        self.password = password or None

    # --- Questions ---

    def add_question(self, question_type: QuestionType = QuestionType.MULTIPLE_CHOICE) -> str:
        question = empty_question(QuestionType(question_type))
        self.questions = [*self.questions, question]
        return question.id

    def remove_question(self, question_id: str) -> None:
        self.get_question(question_id)
        self.questions = [q for q in self.questions if q.id != question_id]

    def update_question_text(self, question_id: str, text: str) -> None:
        self._edit(question_id, lambda q: replace(q, text=text))

    def set_code_snippet(self, question_id: str, code_snippet: str | None) -> None:
        self._edit(question_id, lambda q: replace(q, code_snippet=code_snippet or None))

    def set_image(self, question_id: str, image: QuestionImage | None) -> None:
        self._edit(question_id, lambda q: replace(q, image=image))

    def set_question_type(self, question_id: str, new_type: QuestionType) -> None:
        new_type = QuestionType(new_type)

        def rebuild(question: Question) -> Question:
            if question.type is new_type:
                return question
            return empty_question(
                new_type,
                question_id=question.id,
                text=question.text,
                code_snippet=question.code_snippet,
                image=question.image,
            )

        self._edit(question_id, rebuild)

    def set_multiple_answer(self, question_id: str, is_multiple_answer: bool) -> None:
        self._edit_typed(
            question_id,
            MultipleChoiceQuestion,
            lambda q: replace(q, is_multiple_answer=is_multiple_answer),
        )

    # --- Multiple choice options ---

    def add_option(self, question_id: str) -> str:
        option = Option(id=new_id())
        self._edit_typed(
            question_id,
            MultipleChoiceQuestion,
            lambda q: replace(q, options=[*q.options, option]),
        )
        return option.id

    def update_option(
        self,
        question_id: str,
        option_id: str,
        text: str | None = None,
        is_correct: bool | None = None,
    ) -> None:
        def apply(question: MultipleChoiceQuestion) -> MultipleChoiceQuestion:
            _require_item(question.options, option_id, "Option")
            options: list[Option] = []
            for option in question.options:
                if option.id == option_id:
                    option = replace(
                        option,
                        text=option.text if text is None else text,
                        is_correct=option.is_correct if is_correct is None else is_correct,
                    )
                elif is_correct is True and not question.is_multiple_answer:
                    # Single-answer questions keep exactly one correct option.
                    option = replace(option, is_correct=False)
                else:
                    option = replace(option)
                options.append(option)
            return replace(question, options=options)

        self._edit_typed(question_id, MultipleChoiceQuestion, apply)

    def remove_option(self, question_id: str, option_id: str) -> None:
        def apply(question: MultipleChoiceQuestion) -> MultipleChoiceQuestion:
            _require_item(question.options, option_id, "Option")
            return replace(question, options=[o for o in question.options if o.id != option_id])

        self._edit_typed(question_id, MultipleChoiceQuestion, apply)

    # --- Fill-in-the-blank answers ---

    def add_blank(self, question_id: str) -> str:
        blank = BlankItem(id=new_id())
        self._edit_typed(
            question_id,
            FillInBlanksQuestion,
            lambda q: replace(q, blanks=[*q.blanks, blank]),
        )
        return blank.id

    def update_blank(self, question_id: str, blank_id: str, answer: str) -> None:
        def apply(question: FillInBlanksQuestion) -> FillInBlanksQuestion:
            _require_item(question.blanks, blank_id, "Blank")
            return replace(
                question,
                blanks=[
                    replace(b, answer=answer) if b.id == blank_id else replace(b)
                    for b in question.blanks
                ],
            )

        self._edit_typed(question_id, FillInBlanksQuestion, apply)

    def remove_blank(self, question_id: str, blank_id: str) -> None:
        def apply(question: FillInBlanksQuestion) -> FillInBlanksQuestion:
            _require_item(question.blanks, blank_id, "Blank")
            return replace(question, blanks=[b for b in question.blanks if b.id != blank_id])

        self._edit_typed(question_id, FillInBlanksQuestion, apply)

    # --- Sequence items ---

    def add_sequence_item(self, question_id: str) -> str:
        question = self.get_question(question_id)
        if not isinstance(question, SequenceQuestion):
            raise DraftError(f"Question {question_id} is a {question.type.value} question")
        item = SequenceItem(id=new_id(), correct_position=len(question.sequence_items) + 1)
        self._edit_typed(
            question_id,
            SequenceQuestion,
            lambda q: replace(q, sequence_items=[*q.sequence_items, item]),
        )
        return item.id

    def update_sequence_item(
        self,
        question_id: str,
        item_id: str,
        text: str | None = None,
        correct_position: int | None = None,
    ) -> None:
        def apply(question: SequenceQuestion) -> SequenceQuestion:
            _require_item(question.sequence_items, item_id, "Sequence item")
            position = None if correct_position is None else int(correct_position)
            count = len(question.sequence_items)
            if position is not None and not 1 <= position <= count:
                raise DraftError(f"Correct position must be between 1 and {count}")
            items = [
                replace(
                    item,
                    text=item.text if text is None else text,
                    correct_position=item.correct_position if position is None else position,
                )
                if item.id == item_id
                else replace(item)
                for item in question.sequence_items
            ]
            return replace(question, sequence_items=items)

        self._edit_typed(question_id, SequenceQuestion, apply)

    def remove_sequence_item(self, question_id: str, item_id: str) -> None:
        """Remove an item and close the gap it leaves in the positions."""

        def apply(question: SequenceQuestion) -> SequenceQuestion:
            _require_item(question.sequence_items, item_id, "Sequence item")
            removed = next(i for i in question.sequence_items if i.id == item_id)
            gap = removed.correct_position
            items = [
                replace(item, correct_position=item.correct_position - 1)
                if item.correct_position > gap
                else replace(item)
                for item in question.sequence_items
                if item.id != item_id
            ]
            pre_filled = [
                position - 1 if position > gap else position
                for position in question.pre_filled_positions
                if position != gap
            ]
            return replace(question, sequence_items=items, pre_filled_positions=pre_filled)

        self._edit_typed(question_id, SequenceQuestion, apply)

    def set_pre_filled_positions(self, question_id: str, positions: Iterable[int]) -> None:
        cleaned = list(dict.fromkeys(int(position) for position in positions))
        self._edit_typed(
            question_id,
            SequenceQuestion,
            lambda q: replace(q, pre_filled_positions=cleaned),
        )

    # --- Helpers ---

    def _edit(self, question_id: str, transform: Callable[[Question], Question]) -> None:
        self.get_question(question_id)
        self.questions = [
            transform(question) if question.id == question_id else question
            for question in self.questions
        ]

    def _edit_typed(self, question_id: str, expected: type, transform: Callable) -> None:
        question = self.get_question(question_id)
        if not isinstance(question, expected):
            raise DraftError(f"Question {question_id} is a {question.type.value} question")
        self._edit(question_id, transform)


def _require_item(items: list, item_id: str, label: str) -> None:
    if not any(item.id == item_id for item in items):
        raise DraftError(f"{label} {item_id} not found")


def validate(draft: QuizDraft) -> list[str]:
    """Return human-readable problems that block saving; empty means savable."""
    errors: list[str] = []

    if not draft.title.strip():
        errors.append("Quiz title is required")
    if not draft.questions:
        errors.append("At least one question is required")

    for number, question in enumerate(draft.questions, start=1):
        if not question.text.strip():
            errors.append(f"Question {number} text is required")

        if isinstance(question, MultipleChoiceQuestion):
            if len(question.options) < 2:
                errors.append(f"Question {number} must have at least 2 options")
            if not any(option.is_correct for option in question.options):
                errors.append(f"Question {number} must have at least one correct answer")

        elif isinstance(question, FillInBlanksQuestion):
            if not question.blanks:
                errors.append(f"Question {number} must have at least one blank to fill")
            elif any(not blank.answer.strip() for blank in question.blanks):
                errors.append(f"Question {number} has empty answers for blanks")

        elif isinstance(question, SequenceQuestion):
            if len(question.sequence_items) < 2:
                errors.append(f"Question {number} must have at least 2 sequence items")
            else:
                if any(not item.text.strip() for item in question.sequence_items):
                    errors.append(f"Question {number} has empty sequence items")
                positions = [item.correct_position for item in question.sequence_items]
                if len(set(positions)) != len(positions):
                    errors.append(f"Question {number} has duplicate positions in the sequence")
                if any(not 1 <= position <= len(positions) for position in positions):
                    errors.append(
                        f"Question {number} has sequence positions outside 1 to {len(positions)}"
                    )

    return errors


@dataclass(slots=True)
class SaveOutcome:
    errors: list[str] = field(default_factory=list)
    result: "SaveResult | None" = None

    @property
    def saved(self) -> bool:
        return not self.errors and self.result is not None


async def save_draft(draft: QuizDraft, repository: "QuizRepository") -> SaveOutcome:
    """Validate and persist ``draft``; nothing is stored when validation fails."""
    errors = validate(draft)
    if errors:
        logger.info("Draft '%s' not saved: %d validation error(s)", draft.title, len(errors))
        return SaveOutcome(errors=errors)

    quiz = draft.to_quiz()
    if draft.is_editing:
        result = await repository.update(quiz.id, quiz)
    else:
        result = await repository.add(quiz)
        draft.quiz_id = result.quiz.id
    return SaveOutcome(result=result)
