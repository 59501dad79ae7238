"""Responses recorded while a quiz is being taken, and how they are judged."""

from __future__ import annotations

from quizcraft.constants.quiz_constants import UNANSWERED_POSITION
from quizcraft.core.models import (
    FillInBlanksQuestion,
    MultipleChoiceQuestion,
    Question,
    Quiz,
    SequenceQuestion,
    UserAnswer,
)


def _normalize_blank(value: str) -> str:
    return value.strip().lower()


def is_answer_correct(question: Question, answer: UserAnswer | None) -> bool:
    """Judge one question against the recorded answer (``None`` if untouched)."""
    answer = answer or UserAnswer(question_id=question.id)

    if isinstance(question, MultipleChoiceQuestion):
        return set(answer.selected_option_ids) == question.correct_option_ids()

    if isinstance(question, FillInBlanksQuestion):
        return all(
            _normalize_blank(answer.blank_answers.get(blank.id, "")) == _normalize_blank(blank.answer)
            for blank in question.blanks
        )

    if isinstance(question, SequenceQuestion):
        for item in question.sequence_items:
            if question.is_pre_filled(item):
                continue
            chosen = answer.sequence_positions.get(item.id, UNANSWERED_POSITION)
            if chosen != item.correct_position:
                return False
        return True

    raise TypeError(f"Unsupported question type: {type(question).__name__}")


class AnswerSheet:
    """Tracks a test-taker's responses for one (possibly shuffled) quiz."""

    def __init__(self, quiz: Quiz) -> None:
        self._quiz = quiz
        self._answers: dict[str, UserAnswer] = {}

    @property
    def quiz(self) -> Quiz:
        return self._quiz

    def select_option(self, question_id: str, option_id: str) -> UserAnswer:
        question = self._question(question_id, MultipleChoiceQuestion)
        if not any(option.id == option_id for option in question.options):
            raise KeyError(f"Option {option_id} not found in question {question_id}")

        answer = self._answer(question_id)
        if question.is_multiple_answer:
            if option_id in answer.selected_option_ids:
                answer.selected_option_ids = [
                    selected for selected in answer.selected_option_ids if selected != option_id
                ]
            else:
                answer.selected_option_ids = [*answer.selected_option_ids, option_id]
        else:
            answer.selected_option_ids = [option_id]
        return answer

    def set_blank_answer(self, question_id: str, blank_id: str, value: str) -> UserAnswer:
        question = self._question(question_id, FillInBlanksQuestion)
        if not any(blank.id == blank_id for blank in question.blanks):
            raise KeyError(f"Blank {blank_id} not found in question {question_id}")
        answer = self._answer(question_id)
        answer.blank_answers = {**answer.blank_answers, blank_id: value}
        return answer

    def set_sequence_position(self, question_id: str, item_id: str, position: int) -> UserAnswer:
        question = self._question(question_id, SequenceQuestion)
        if not any(item.id == item_id for item in question.sequence_items):
            raise KeyError(f"Sequence item {item_id} not found in question {question_id}")
        if not UNANSWERED_POSITION <= position <= len(question.sequence_items):
            raise ValueError(
                f"Position must be between 1 and {len(question.sequence_items)}, or 0 to clear."
            )
        answer = self._answer(question_id)
        answer.sequence_positions = {**answer.sequence_positions, item_id: position}
        return answer

    def answer_for(self, question_id: str) -> UserAnswer | None:
        return self._answers.get(question_id)

    def answers(self) -> list[UserAnswer]:
        return list(self._answers.values())

    def is_option_selected(self, question_id: str, option_id: str) -> bool:
        answer = self._answers.get(question_id)
        return answer is not None and option_id in answer.selected_option_ids

    def used_positions(self, question_id: str, exclude_item_id: str | None = None) -> set[int]:
        """Positions already chosen for other items; a display hint only."""
        answer = self._answers.get(question_id)
        if answer is None:
            return set()
        return {
            position
            for item_id, position in answer.sequence_positions.items()
            if item_id != exclude_item_id and position != UNANSWERED_POSITION
        }

    def position_choices(self, question_id: str, item_id: str) -> list[tuple[int, bool]]:
        """``(position, used_elsewhere)`` pairs for an item's position picker."""
        question = self._question(question_id, SequenceQuestion)
        used = self.used_positions(question_id, exclude_item_id=item_id)
        return [
            (position, position in used)
            for position in range(1, len(question.sequence_items) + 1)
        ]

    def is_correct(self, question: Question) -> bool:
        return is_answer_correct(question, self._answers.get(question.id))

    def _answer(self, question_id: str) -> UserAnswer:
        answer = self._answers.get(question_id)
        if answer is None:
            answer = UserAnswer(question_id=question_id)
            self._answers[question_id] = answer
        return answer

    def _question(self, question_id: str, expected: type) -> Question:
        question = self._quiz.find_question(question_id)
        if question is None:
            raise KeyError(f"Question {question_id} not found")
        if not isinstance(question, expected):
            raise ValueError(f"Question {question_id} is a {question.type.value} question")
        return question
