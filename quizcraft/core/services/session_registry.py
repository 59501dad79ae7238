"""Service for the quiz-taking sessions and authoring drafts held by the server."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import random
from typing import Sequence
from uuid import uuid4

from quizcraft.core.answer_tracking import AnswerSheet
from quizcraft.core.models import Quiz
from quizcraft.core.quiz_authoring import QuizDraft
from quizcraft.core.randomizer import combined_quiz, shuffle_quiz


class SessionNotFoundError(LookupError):
    """Raised when a session or draft id is unknown or has ended."""


@dataclass(slots=True)
class TakingSession:
    """One attempt at a quiz, against a shuffled copy fixed by ``seed``."""

    session_id: str
    quiz: Quiz
    sheet: AnswerSheet
    seed: int
    started_at: datetime
    source_titles: dict[str, str] = field(default_factory=dict)
    submitted: bool = False


class SessionRegistry:
    """Keeps taking sessions and drafts in memory until they are closed."""

    def __init__(self, seed_source: random.Random | None = None) -> None:
        self._seed_source = seed_source or random.Random()
        self._sessions: dict[str, TakingSession] = {}
        self._drafts: dict[str, QuizDraft] = {}

    # --- Taking sessions ---

    def start_session(self, quiz: Quiz) -> TakingSession:
        seed = self._next_seed()
        shuffled = shuffle_quiz(quiz, random.Random(seed))
        return self._register(shuffled, seed, {})

    def start_combined_session(self, quizzes: Sequence[Quiz]) -> TakingSession:
        seed = self._next_seed()
        combined = combined_quiz(quizzes, random.Random(seed))
        return self._register(combined.quiz, seed, combined.source_titles)

    def get_session(self, session_id: str) -> TakingSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def end_session(self, session_id: str) -> None:
        self.get_session(session_id)
        del self._sessions[session_id]

    def get_session_count(self) -> int:
        return len(self._sessions)

    # --- Drafts ---

    def open_draft(self, draft: QuizDraft) -> str:
        draft_id = uuid4().hex
        self._drafts[draft_id] = draft
        return draft_id

    def get_draft(self, draft_id: str) -> QuizDraft:
        draft = self._drafts.get(draft_id)
        if draft is None:
            raise SessionNotFoundError(f"Draft {draft_id} not found")
        return draft

    def close_draft(self, draft_id: str) -> None:
        self.get_draft(draft_id)
        del self._drafts[draft_id]

    def _register(self, quiz: Quiz, seed: int, source_titles: dict[str, str]) -> TakingSession:
        session = TakingSession(
            session_id=uuid4().hex,
            quiz=quiz,
            sheet=AnswerSheet(quiz),
            seed=seed,
            started_at=datetime.now(timezone.utc),
            source_titles=source_titles,
        )
        self._sessions[session.session_id] = session
        return session

    def _next_seed(self) -> int:
        return self._seed_source.getrandbits(32)
