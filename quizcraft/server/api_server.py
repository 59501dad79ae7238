"""FastAPI server that exposes the quiz page and JSON endpoints."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field
import uvicorn

from quizcraft.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION
from quizcraft.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quizcraft.constants.quiz_constants import ACCESS_COOKIE, ACCESS_LIFETIME_SECONDS
from quizcraft.core.access_gate import AccessGate
from quizcraft.core.blob_store import BlobStoreError
from quizcraft.core.image_attachments import ImageValidationError
from quizcraft.core.markdown_math_renderer import renderer
from quizcraft.core.models import (
    FillInBlanksQuestion,
    MultipleChoiceQuestion,
    Question,
    Quiz,
    SequenceQuestion,
    new_id,
)
from quizcraft.core.quiz_authoring import DraftError, QuizDraft, SaveOutcome, validate
from quizcraft.core.quiz_manager import QuizLockedError, QuizManager, QuizNotFoundError
from quizcraft.core.quiz_serializer import QuizFormatError, quiz_from_record, quiz_to_record
from quizcraft.core.services.session_registry import SessionNotFoundError, TakingSession
from quizcraft.server.student_page import STUDENT_PAGE_HTML

logger = logging.getLogger(__name__)


class QuizPayload(BaseModel):
    """A complete quiz in the stored record format, minus its id."""

    title: str = ""
    password: str | None = None
    questions: list[dict[str, Any]] = Field(default_factory=list)


class AccessPayload(BaseModel):
    code: str


class DraftPayload(BaseModel):
    quiz_id: str | None = None


class DraftOperationPayload(BaseModel):
    """One ``QuizDraft`` method call, e.g. ``{"op": "add_option", "arguments": {...}}``."""

    op: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class SessionPayload(BaseModel):
    quiz_id: str
    password: str | None = None


class AnswerPayload(BaseModel):
    """Exactly one of ``option_id``, ``blank_id`` or ``item_id`` selects the action."""

    question_id: str
    option_id: str | None = None
    blank_id: str | None = None
    value: str | None = None
    item_id: str | None = None
    position: int | None = None


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


def _get_author_dependency(access_gate: AccessGate):
    def dependency(request: Request) -> None:
        if not access_gate.is_authorized(request.cookies.get(ACCESS_COOKIE)):
            raise HTTPException(status_code=401, detail="Authoring access code required")

    return dependency


def _quiz_summary(quiz: Quiz) -> dict[str, object]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "locked": quiz.is_locked,
        "question_count": len(quiz.questions),
    }


def _quiz_from_payload(payload: QuizPayload) -> Quiz:
    try:
        return quiz_from_record({"id": new_id(), **payload.model_dump()})
    except QuizFormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _save_response(outcome: SaveOutcome) -> dict[str, object]:
    if outcome.errors or outcome.result is None:
        raise HTTPException(status_code=422, detail={"errors": outcome.errors})
    return {
        "quiz": quiz_to_record(outcome.result.quiz),
        "sync_status": outcome.result.status.value,
    }


def _draft_response(draft_id: str, draft: QuizDraft) -> dict[str, object]:
    snapshot = Quiz(
        id=draft.quiz_id or "",
        title=draft.title,
        questions=draft.questions,
        password=draft.password,
    )
    return {
        "draft_id": draft_id,
        "editing": draft.is_editing,
        "quiz": quiz_to_record(snapshot),
        "errors": validate(draft),
    }


def _taking_question(question: Question, session: TakingSession) -> dict[str, object]:
    sheet = session.sheet
    answer = sheet.answer_for(question.id)
    payload: dict[str, object] = {
        "id": question.id,
        "type": question.type.value,
        **renderer.render_question(question),
        "image": (
            {"data": question.image.data, "name": question.image.name}
            if question.image is not None
            else None
        ),
        "source_title": session.source_titles.get(question.id),
    }

    if isinstance(question, MultipleChoiceQuestion):
        payload["is_multiple_answer"] = question.is_multiple_answer
        payload["options"] = [
            {
                "id": option.id,
                "text": option.text,
                "selected": sheet.is_option_selected(question.id, option.id),
            }
            for option in question.options
        ]
    elif isinstance(question, FillInBlanksQuestion):
        payload["blanks"] = [
            {"id": blank.id, "value": answer.blank_answers.get(blank.id, "") if answer else ""}
            for blank in question.blanks
        ]
    elif isinstance(question, SequenceQuestion):
        items = []
        for item in question.sequence_items:
            pre_filled = question.is_pre_filled(item)
            if pre_filled:
                position = item.correct_position
            else:
                position = answer.sequence_positions.get(item.id, 0) if answer else 0
            items.append(
                {
                    "id": item.id,
                    "text": item.text,
                    "pre_filled": pre_filled,
                    "position": position,
                    "choices": [
                        {"position": choice, "used": used}
                        for choice, used in sheet.position_choices(question.id, item.id)
                    ],
                }
            )
        payload["items"] = items

    if session.submitted:
        payload["is_correct"] = sheet.is_correct(question)
    return payload


def _session_response(session: TakingSession) -> dict[str, object]:
    return {
        "session_id": session.session_id,
        "quiz_id": session.quiz.id,
        "title": session.quiz.title,
        "submitted": session.submitted,
        "questions": [_taking_question(question, session) for question in session.quiz.questions],
    }


def create_api_app(quiz_manager: QuizManager, access_gate: AccessGate) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Loading quizzes…")
        await quiz_manager.load()
        yield
        logger.info("Shutting down %s", APP_NAME)
        await quiz_manager.aclose()

    app = FastAPI(
        title=f"{APP_NAME} API",
        version=APP_VERSION,
        description=APP_ABOUT_TEXT,
        license_info={"name": APP_LICENSE},
        lifespan=lifespan,
    )
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)
    author_only = [Depends(_get_author_dependency(access_gate))]

    @app.exception_handler(QuizNotFoundError)
    @app.exception_handler(SessionNotFoundError)
    async def handle_not_found(request: Request, exc: LookupError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.get("/", response_class=HTMLResponse)
    def serve_page() -> str:
        return STUDENT_PAGE_HTML

    @app.get("/api/about")
    def get_about() -> dict[str, str]:
        return {
            "name": APP_NAME,
            "version": APP_VERSION,
            "license": APP_LICENSE,
            "about": APP_ABOUT_TEXT,
        }

    # --- Access ---

    @app.get("/api/access")
    def get_access(request: Request) -> dict[str, object]:
        return {
            "enabled": access_gate.enabled,
            "authorized": access_gate.is_authorized(request.cookies.get(ACCESS_COOKIE)),
        }

    @app.post("/api/access")
    def grant_access(payload: AccessPayload, response: Response) -> dict[str, object]:
        expiry = access_gate.verify(payload.code)
        if expiry is None:
            raise HTTPException(status_code=403, detail="The access code you entered is incorrect.")
        response.set_cookie(
            key=ACCESS_COOKIE,
            value=str(expiry),
            max_age=ACCESS_LIFETIME_SECONDS,
            samesite="lax",
            httponly=True,
        )
        return {"authorized": True, "expires_at": expiry}

    # --- Quizzes ---

    @app.get("/api/quizzes")
    def list_quizzes(manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, object]]:
        return [_quiz_summary(quiz) for quiz in manager.list_quizzes()]

    @app.get("/api/quizzes/{quiz_id}/edit", dependencies=author_only)
    def get_quiz_for_editing(
        quiz_id: str, manager: QuizManager = Depends(quiz_manager_dep)
    ) -> dict[str, object]:
        return quiz_to_record(manager.get_quiz(quiz_id))

    @app.post("/api/quizzes", status_code=201, dependencies=author_only)
    async def create_quiz(
        payload: QuizPayload, manager: QuizManager = Depends(quiz_manager_dep)
    ) -> dict[str, object]:
        outcome = await manager.save_quiz(_quiz_from_payload(payload))
        return _save_response(outcome)

    @app.put("/api/quizzes/{quiz_id}", dependencies=author_only)
    async def update_quiz(
        quiz_id: str,
        payload: QuizPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        outcome = await manager.save_quiz(_quiz_from_payload(payload), quiz_id=quiz_id)
        return _save_response(outcome)

    @app.get("/api/answers", dependencies=author_only)
    def get_answer_key(manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, object]]:
        return [
            {
                "quiz_title": entry.quiz_title,
                "question_id": entry.question.id,
                "type": entry.question.type.value,
                **renderer.render_question(entry.question),
                "correct_answers": entry.correct_answers,
            }
            for entry in manager.answer_key()
        ]

    # --- Drafts ---

    @app.post("/api/drafts", status_code=201, dependencies=author_only)
    def open_draft(
        payload: DraftPayload, manager: QuizManager = Depends(quiz_manager_dep)
    ) -> dict[str, object]:
        draft_id, draft = manager.open_draft(payload.quiz_id)
        return _draft_response(draft_id, draft)

    @app.get("/api/drafts/{draft_id}", dependencies=author_only)
    def get_draft(draft_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return _draft_response(draft_id, manager.get_draft(draft_id))

    @app.delete("/api/drafts/{draft_id}", status_code=204, dependencies=author_only)
    def discard_draft(draft_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> Response:
        manager.discard_draft(draft_id)
        return Response(status_code=204)

    @app.post("/api/drafts/{draft_id}/operations", dependencies=author_only)
    def apply_draft_operation(
        draft_id: str,
        payload: DraftOperationPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            created_id = manager.apply_draft_operation(draft_id, payload.op, payload.arguments)
        except DraftError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        response = _draft_response(draft_id, manager.get_draft(draft_id))
        response["created_id"] = created_id
        return response

    @app.get("/api/drafts/{draft_id}/validation", dependencies=author_only)
    def validate_draft(draft_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return {"errors": manager.validate_draft(draft_id)}

    @app.post("/api/drafts/{draft_id}/save", dependencies=author_only)
    async def save_draft(draft_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return _save_response(await manager.save_draft(draft_id))

    @app.put("/api/drafts/{draft_id}/questions/{question_id}/image", dependencies=author_only)
    async def attach_image(
        draft_id: str,
        question_id: str,
        name: str,
        request: Request,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        data = await request.body()
        content_type = request.headers.get("content-type", "")
        try:
            result = await manager.attach_image(draft_id, question_id, name, content_type, data)
        except (ImageValidationError, DraftError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {
            "image": {"data": result.image.data, "name": result.image.name, "path": result.image.path},
            "uploaded": result.uploaded,
            "warning": result.warning,
        }

    @app.delete("/api/drafts/{draft_id}/questions/{question_id}/image", dependencies=author_only)
    async def detach_image(
        draft_id: str, question_id: str, manager: QuizManager = Depends(quiz_manager_dep)
    ) -> dict[str, object]:
        try:
            await manager.detach_image(draft_id, question_id)
        except DraftError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except BlobStoreError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return _draft_response(draft_id, manager.get_draft(draft_id))

    # --- Taking sessions ---

    @app.post("/api/sessions", status_code=201)
    def start_session(
        payload: SessionPayload, manager: QuizManager = Depends(quiz_manager_dep)
    ) -> dict[str, object]:
        try:
            session = manager.start_session(payload.quiz_id, payload.password)
        except QuizLockedError as exc:
            raise HTTPException(status_code=403, detail=str(exc)) from exc
        return _session_response(session)

    @app.get("/api/sessions/{session_id}")
    def get_session(session_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return _session_response(manager.get_session(session_id))

    @app.post("/api/sessions/{session_id}/answers")
    def record_answer(
        session_id: str,
        payload: AnswerPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        try:
            if payload.option_id is not None:
                manager.select_option(session_id, payload.question_id, payload.option_id)
            elif payload.blank_id is not None:
                manager.set_blank_answer(
                    session_id, payload.question_id, payload.blank_id, payload.value or ""
                )
            elif payload.item_id is not None and payload.position is not None:
                manager.set_sequence_position(
                    session_id, payload.question_id, payload.item_id, payload.position
                )
            else:
                raise ValueError("Answer must name an option, a blank, or an item and position.")
        except (KeyError, ValueError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return _session_response(manager.get_session(session_id))

    @app.post("/api/sessions/{session_id}/submit")
    def submit_session(session_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        result, results = manager.submit_session(session_id)
        return {
            "correct": result.correct,
            "total": result.total,
            "percentage": result.percentage,
            "verdict": result.verdict,
            "results": [
                {"question_id": item.question_id, "is_correct": item.is_correct} for item in results
            ],
        }

    return app


def run_api_server(
    quiz_manager: QuizManager,
    access_gate: AccessGate,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    log_level: str = "info",
) -> None:
    """Serve the application with uvicorn until interrupted."""
    app = create_api_app(quiz_manager, access_gate)
    config = uvicorn.Config(app=app, host=host, port=port, log_level=log_level.lower())
    server = uvicorn.Server(config)
    server.run()
