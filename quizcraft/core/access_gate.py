"""Shared-passphrase gate for authoring and per-quiz password checks.

Neither check is a security boundary: the gate only hands out an expiry
timestamp that the browser keeps, and quiz passwords are stored in plain text.
"""

from __future__ import annotations

import logging
import time

from quizcraft.constants.quiz_constants import ACCESS_LIFETIME_SECONDS
from quizcraft.core.models import Quiz

logger = logging.getLogger(__name__)


class AccessGate:
    """Grants authoring access for a fixed lifetime after the admin code is entered."""

    def __init__(self, admin_code: str | None, lifetime_seconds: int = ACCESS_LIFETIME_SECONDS) -> None:
        self._admin_code = admin_code or None
        self._lifetime_seconds = lifetime_seconds

    @property
    def enabled(self) -> bool:
        return self._admin_code is not None

    def verify(self, code: str, now: float | None = None) -> float | None:
        """Return the access expiry (epoch seconds) if ``code`` is right, else ``None``."""
        if not self.enabled:
            logger.warning("Access code entered but no admin code is configured")
            return None
        if code != self._admin_code:
            return None
        issued_at = time.time() if now is None else now
        return issued_at + self._lifetime_seconds

    @staticmethod
    def is_authorized(expiry: float | str | None, now: float | None = None) -> bool:
        if expiry is None or expiry == "":
            return False
        try:
            expiry_value = float(expiry)
        except (TypeError, ValueError):
            return False
        current = time.time() if now is None else now
        return current < expiry_value


def password_matches(quiz: Quiz, candidate: str | None) -> bool:
    """Quizzes without a password are always open."""
    if not quiz.password:
        return True
    return candidate == quiz.password
