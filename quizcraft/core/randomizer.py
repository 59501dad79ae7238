"""Presentation shuffling for quizzes.

All shuffles go through ``random.Random.shuffle`` (Fisher-Yates), so every
permutation is equally likely. Shuffling only changes display order: option
correctness and sequence ``correct_position`` values travel with their items.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import random
from typing import Sequence, TypeVar

from quizcraft.constants.quiz_constants import COMBINED_QUIZ_ID, COMBINED_QUIZ_TITLE
from quizcraft.core.models import (
    FillInBlanksQuestion,
    MultipleChoiceQuestion,
    Question,
    Quiz,
    SequenceQuestion,
    copy_question,
    copy_quiz,
)

T = TypeVar("T")


def shuffled(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a uniformly shuffled copy of ``items``."""
    result = list(items)
    (rng or random.Random()).shuffle(result)
    return result


def shuffle_question(question: Question, rng: random.Random) -> Question:
    question = copy_question(question)
    if isinstance(question, MultipleChoiceQuestion):
        return replace(question, options=shuffled(question.options, rng))
    if isinstance(question, SequenceQuestion):
        return replace(question, sequence_items=shuffled(question.sequence_items, rng))
    return question


def shuffle_quiz(quiz: Quiz, rng: random.Random | None = None) -> Quiz:
    """Copy ``quiz`` with question, option and sequence-item order shuffled."""
    rng = rng or random.Random()
    copied = copy_quiz(quiz)
    questions = [shuffle_question(question, rng) for question in copied.questions]
    return replace(copied, questions=shuffled(questions, rng))


@dataclass(slots=True)
class CombinedQuiz:
    """Every stored question in one shuffled quiz, tagged with its source title."""

    quiz: Quiz
    source_titles: dict[str, str] = field(default_factory=dict)

    def source_title(self, question_id: str) -> str | None:
        return self.source_titles.get(question_id)


def combined_quiz(quizzes: Sequence[Quiz], rng: random.Random | None = None) -> CombinedQuiz:
    rng = rng or random.Random()
    flattened: list[Question] = []
    source_titles: dict[str, str] = {}
    for quiz in quizzes:
        for question in quiz.questions:
            flattened.append(copy_question(question))
            source_titles[question.id] = quiz.title
    merged = Quiz(id=COMBINED_QUIZ_ID, title=COMBINED_QUIZ_TITLE, questions=flattened)
    return CombinedQuiz(quiz=shuffle_quiz(merged, rng), source_titles=source_titles)


@dataclass(slots=True)
class AnswerKeyEntry:
    quiz_title: str
    question: Question
    correct_answers: list[str]


def answers_view(quizzes: Sequence[Quiz]) -> list[AnswerKeyEntry]:
    """Every question with its correct answers, in stored order."""
    entries: list[AnswerKeyEntry] = []
    for quiz in quizzes:
        for question in quiz.questions:
            entries.append(
                AnswerKeyEntry(
                    quiz_title=quiz.title,
                    question=copy_question(question),
                    correct_answers=_correct_answers(question),
                )
            )
    return entries


def _correct_answers(question: Question) -> list[str]:
    if isinstance(question, MultipleChoiceQuestion):
        return [option.text for option in question.options if option.is_correct]
    if isinstance(question, FillInBlanksQuestion):
        return [blank.answer for blank in question.blanks]
    ordered = sorted(question.sequence_items, key=lambda item: item.correct_position)
    return [item.text for item in ordered]
