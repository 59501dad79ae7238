"""Reduce per-question correctness into a score and a verdict."""

from __future__ import annotations

from dataclasses import dataclass

from quizcraft.constants.quiz_constants import FALLBACK_VERDICT, VERDICT_BANDS
from quizcraft.core.answer_tracking import AnswerSheet
from quizcraft.core.models import Quiz


def verdict_for(correct: int, total: int) -> str:
    if total <= 0:
        return FALLBACK_VERDICT
    percentage = correct / total * 100
    for threshold, verdict in VERDICT_BANDS:
        if percentage >= threshold:
            return verdict
    return FALLBACK_VERDICT


@dataclass(slots=True, frozen=True)
class ScoreResult:
    """Immutable snapshot returned to consumers."""

    correct: int
    total: int

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.correct / self.total * 100

    @property
    def verdict(self) -> str:
        return verdict_for(self.correct, self.total)


@dataclass(slots=True, frozen=True)
class QuestionResult:
    question_id: str
    is_correct: bool


def question_results(quiz: Quiz, sheet: AnswerSheet) -> list[QuestionResult]:
    return [
        QuestionResult(question_id=question.id, is_correct=sheet.is_correct(question))
        for question in quiz.questions
    ]


def score(quiz: Quiz, sheet: AnswerSheet) -> ScoreResult:
    correct = sum(1 for result in question_results(quiz, sheet) if result.is_correct)
    return ScoreResult(correct=correct, total=len(quiz.questions))
