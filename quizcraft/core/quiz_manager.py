"""Business logic shared by the HTTP routes: storage, drafts and taking sessions."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import TYPE_CHECKING, Any

from quizcraft.constants.quiz_constants import COMBINED_QUIZ_ID
from quizcraft.core.access_gate import password_matches
from quizcraft.core.blob_store import InMemoryBlobStore, RestBlobStore
from quizcraft.core.image_attachments import AttachResult, ImageAttachmentService
from quizcraft.core.models import Quiz, QuestionType
from quizcraft.core.quiz_authoring import DraftError, QuizDraft, SaveOutcome, save_draft, validate
from quizcraft.core.randomizer import AnswerKeyEntry, answers_view
from quizcraft.core.remote_store import InMemoryRemoteStore, RestRemoteStore
from quizcraft.core.scoring import QuestionResult, ScoreResult, question_results, score
from quizcraft.core.services.quiz_repository import QuizRepository
from quizcraft.core.services.session_registry import SessionRegistry, TakingSession

if TYPE_CHECKING:
    from quizcraft.utils.settings import Settings

logger = logging.getLogger(__name__)


class QuizNotFoundError(LookupError):
    """Raised when a quiz id is not in the local collection."""


class QuizLockedError(PermissionError):
    """Raised when a quiz password does not match."""


# Draft methods reachable through ``apply_draft_operation``.
DRAFT_OPERATIONS = frozenset(
    {
        "set_title",
        "set_password",
        "add_question",
        "remove_question",
        "update_question_text",
        "set_question_type",
        "set_multiple_answer",
        "set_code_snippet",
        "add_option",
        "update_option",
        "remove_option",
        "add_blank",
        "update_blank",
        "remove_blank",
        "add_sequence_item",
        "update_sequence_item",
        "remove_sequence_item",
        "set_pre_filled_positions",
    }
)
_TYPE_ARGUMENTS = ("question_type", "new_type")


class QuizManager:
    """Facade for quiz services: Repository, SessionRegistry and image attachments."""

    def __init__(
        self,
        repository: QuizRepository,
        image_service: ImageAttachmentService,
        registry: SessionRegistry | None = None,
    ) -> None:
        self._repository = repository
        self._images = image_service
        self._registry = registry or SessionRegistry()

    async def load(self) -> None:
        await self._repository.load()

    async def aclose(self) -> None:
        await self._repository.aclose()
        await self._images.aclose()

    # --- Quiz Repository Delegation ---

    def list_quizzes(self) -> list[Quiz]:
        return self._repository.list_quizzes()

    def get_quiz(self, quiz_id: str) -> Quiz:
        quiz = self._repository.get_by_id(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")
        return quiz

    async def save_quiz(self, quiz: Quiz, quiz_id: str | None = None) -> SaveOutcome:
        """Validate and store a complete quiz; ``quiz_id`` marks an update."""
        if quiz_id is not None:
            self.get_quiz(quiz_id)
            draft = QuizDraft.from_quiz(replace(quiz, id=quiz_id))
        else:
            draft = QuizDraft(title=quiz.title, password=quiz.password, questions=quiz.questions)
        return await save_draft(draft, self._repository)

    # --- Drafts ---

    def open_draft(self, quiz_id: str | None = None) -> tuple[str, QuizDraft]:
        draft = QuizDraft.from_quiz(self.get_quiz(quiz_id)) if quiz_id else QuizDraft()
        return self._registry.open_draft(draft), draft

    def get_draft(self, draft_id: str) -> QuizDraft:
        return self._registry.get_draft(draft_id)

    def discard_draft(self, draft_id: str) -> None:
        self._registry.close_draft(draft_id)

    def apply_draft_operation(self, draft_id: str, op: str, arguments: dict[str, Any]) -> Any:
        draft = self._registry.get_draft(draft_id)
        if op not in DRAFT_OPERATIONS:
            raise DraftError(f"Unknown draft operation '{op}'")
        arguments = dict(arguments)
        for key in _TYPE_ARGUMENTS:
            if key in arguments:
                try:
                    arguments[key] = QuestionType(arguments[key])
                except ValueError as exc:
                    raise DraftError(f"Unknown question type '{arguments[key]}'") from exc
        operation = getattr(draft, op)
        try:
            return operation(**arguments)
        except DraftError:
            raise
        except (TypeError, ValueError) as exc:
            raise DraftError(f"Bad arguments for '{op}': {exc}") from exc

    def validate_draft(self, draft_id: str) -> list[str]:
        return validate(self._registry.get_draft(draft_id))

    async def save_draft(self, draft_id: str) -> SaveOutcome:
        draft = self._registry.get_draft(draft_id)
        outcome = await save_draft(draft, self._repository)
        if outcome.saved:
            self._registry.close_draft(draft_id)
        return outcome

    async def attach_image(
        self,
        draft_id: str,
        question_id: str,
        name: str,
        content_type: str,
        data: bytes,
    ) -> AttachResult:
        draft = self._registry.get_draft(draft_id)
        draft.get_question(question_id)
        result = await self._images.attach(name, content_type, data)
        draft.set_image(question_id, result.image)
        return result

    async def detach_image(self, draft_id: str, question_id: str) -> None:
        draft = self._registry.get_draft(draft_id)
        question = draft.get_question(question_id)
        await self._images.detach(question.image)
        draft.set_image(question_id, None)

    # --- Taking Sessions ---

    def start_session(self, quiz_id: str, password: str | None = None) -> TakingSession:
        if quiz_id == COMBINED_QUIZ_ID:
            open_quizzes = [quiz for quiz in self._repository.list_quizzes() if not quiz.is_locked]
            return self._registry.start_combined_session(open_quizzes)

        quiz = self.get_quiz(quiz_id)
        if not password_matches(quiz, password):
            raise QuizLockedError("Incorrect quiz password")
        return self._registry.start_session(quiz)

    def get_session(self, session_id: str) -> TakingSession:
        return self._registry.get_session(session_id)

    def select_option(self, session_id: str, question_id: str, option_id: str) -> None:
        self._open_session(session_id).sheet.select_option(question_id, option_id)

    def set_blank_answer(self, session_id: str, question_id: str, blank_id: str, value: str) -> None:
        self._open_session(session_id).sheet.set_blank_answer(question_id, blank_id, value)

    def set_sequence_position(
        self, session_id: str, question_id: str, item_id: str, position: int
    ) -> None:
        self._open_session(session_id).sheet.set_sequence_position(question_id, item_id, position)

    def submit_session(self, session_id: str) -> tuple[ScoreResult, list[QuestionResult]]:
        session = self._registry.get_session(session_id)
        session.submitted = True
        result = score(session.quiz, session.sheet)
        logger.info(
            "Session %s scored %d/%d (%s)",
            session_id,
            result.correct,
            result.total,
            result.verdict,
        )
        return result, question_results(session.quiz, session.sheet)

    def answer_key(self) -> list[AnswerKeyEntry]:
        return answers_view(self._repository.list_quizzes())

    def _open_session(self, session_id: str) -> TakingSession:
        session = self._registry.get_session(session_id)
        if session.submitted:
            raise RuntimeError("Answers can no longer change after the quiz is submitted.")
        return session


def create_quiz_manager(settings: Settings) -> QuizManager:
    """Wire the stores named in ``settings``; no store URL means in-memory stores."""
    if settings.store_url:
        remote_store = RestRemoteStore(
            settings.store_url,
            api_key=settings.store_key,
            timeout=settings.request_timeout_seconds,
        )
        blob_store = RestBlobStore(
            settings.store_url,
            api_key=settings.store_key,
            timeout=settings.request_timeout_seconds,
        )
    else:
        logger.warning("No store URL configured; quizzes are kept in memory and the local cache")
        remote_store = InMemoryRemoteStore()
        blob_store = InMemoryBlobStore()

    repository = QuizRepository(remote_store, local_cache=settings.local_cache_path)
    return QuizManager(repository, ImageAttachmentService(blob_store, settings.image_bucket))
