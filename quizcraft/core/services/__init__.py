"""Stateful services behind the quiz manager."""

from .quiz_repository import QuizRepository, SaveResult, SyncStatus
from .session_registry import SessionNotFoundError, SessionRegistry, TakingSession

__all__ = [
    "QuizRepository",
    "SaveResult",
    "SessionNotFoundError",
    "SessionRegistry",
    "SyncStatus",
    "TakingSession",
]
