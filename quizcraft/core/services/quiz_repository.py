"""Service for managing the collection of stored quizzes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from pathlib import Path
import random

from quizcraft.constants.quiz_constants import QUIZZES_TABLE
from quizcraft.core.models import Quiz, copy_quiz
from quizcraft.core.quiz_serializer import (
    QuizFormatError,
    load_quizzes_from_file,
    quiz_from_record,
    quiz_to_record,
    save_quizzes_to_file,
)
from quizcraft.core.randomizer import shuffle_quiz
from quizcraft.core.remote_store import RemoteStore, RemoteStoreError

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    SYNCED = "synced"
    LOCAL_ONLY = "local-only"


@dataclass(slots=True)
class SaveResult:
    """The quiz as stored locally and whether the remote store accepted it."""

    quiz: Quiz
    status: SyncStatus

    @property
    def synced(self) -> bool:
        return self.status is SyncStatus.SYNCED


class QuizRepository:
    """Local quiz collection kept opportunistically in sync with a remote store.

    Remote writes are best-effort: a failed insert or update is logged and the
    local collection is changed anyway, with ``SyncStatus.LOCAL_ONLY`` reported
    to the caller. The collection starts empty until ``load()`` or
    ``fetch_all()`` is awaited.
    """

    def __init__(
        self,
        remote_store: RemoteStore,
        local_cache: Path | None = None,
        rng: random.Random | None = None,
        table: str = QUIZZES_TABLE,
    ) -> None:
        self._remote = remote_store
        self._local_cache = local_cache
        self._rng = rng or random.Random()
        self._table = table
        self._quizzes: list[Quiz] = []

    async def load(self) -> None:
        """Restore the local cache, then refresh from the remote store if reachable.

        A remote store that does not outlive the process is seeded from the
        cache instead, since refreshing from it would empty the collection.
        """
        if self._local_cache is not None:
            try:
                self._quizzes = load_quizzes_from_file(self._local_cache)
                logger.info("Loaded %d quiz(zes) from %s", len(self._quizzes), self._local_cache)
            except QuizFormatError as exc:
                logger.warning("Ignoring unreadable local cache %s: %s", self._local_cache, exc)

        if not self._remote.persistent:
            if self._quizzes:
                await self._remote.insert(
                    self._table, [quiz_to_record(quiz) for quiz in self._quizzes]
                )
            return

        try:
            await self.fetch_all()
        except RemoteStoreError as exc:
            logger.error("Error fetching quizzes: %s", exc)

    async def fetch_all(self) -> list[Quiz]:
        """Replace the local collection with the remote one.

        Raises ``RemoteStoreError`` (or ``QuizFormatError`` for unreadable
        rows) and leaves the local collection untouched on failure.
        """
        records = await self._remote.select_all(self._table)
        quizzes = [quiz_from_record(record) for record in records]
        self._quizzes = quizzes
        self._persist_local()
        logger.info("Fetched %d quiz(zes) from the remote store", len(quizzes))
        return self.list_quizzes()

    async def add(self, quiz: Quiz) -> SaveResult:
        # Storage order must not reveal authoring order.
        shuffled = shuffle_quiz(quiz, self._rng)
        try:
            rows = await self._remote.insert(self._table, [quiz_to_record(shuffled)])
        except RemoteStoreError as exc:
            logger.warning("Error saving quiz %s, keeping it locally: %s", quiz.id, exc)
            stored = shuffled
            status = SyncStatus.LOCAL_ONLY
        else:
            stored = self._echoed_quiz(rows, shuffled)
            status = SyncStatus.SYNCED

        self._quizzes = [*self._quizzes, stored]
        self._persist_local()
        return SaveResult(quiz=copy_quiz(stored), status=status)

    def _echoed_quiz(self, rows: list[dict], sent: Quiz) -> Quiz:
        """The row the store echoed back, or what was sent when the echo is unusable."""
        if not rows:
            logger.warning("Quiz %s was stored remotely but no row was echoed back", sent.id)
            return sent
        try:
            return quiz_from_record(rows[0])
        except QuizFormatError as exc:
            logger.warning(
                "Quiz %s was stored remotely but its echoed row is unreadable: %s", sent.id, exc
            )
            return sent

    async def update(self, quiz_id: str, quiz: Quiz) -> SaveResult:
        replacement = copy_quiz(quiz)
        replacement.id = quiz_id
        try:
            await self._remote.update(self._table, quiz_to_record(replacement), quiz_id)
            status = SyncStatus.SYNCED
        except RemoteStoreError as exc:
            logger.warning("Error updating quiz %s, keeping the change locally: %s", quiz_id, exc)
            status = SyncStatus.LOCAL_ONLY

        self._quizzes = [replacement if q.id == quiz_id else q for q in self._quizzes]
        self._persist_local()
        return SaveResult(quiz=copy_quiz(replacement), status=status)

    def get_by_id(self, quiz_id: str) -> Quiz | None:
        for quiz in self._quizzes:
            if quiz.id == quiz_id:
                return copy_quiz(quiz)
        return None

    def list_quizzes(self) -> list[Quiz]:
        return [copy_quiz(quiz) for quiz in self._quizzes]

    def get_quiz_count(self) -> int:
        return len(self._quizzes)

    def _persist_local(self) -> None:
        if self._local_cache is None:
            return
        try:
            save_quizzes_to_file(self._local_cache, self._quizzes)
        except OSError as exc:
            logger.warning("Could not write local cache %s: %s", self._local_cache, exc)

    async def aclose(self) -> None:
        await self._remote.aclose()
