"""Application entry point for QuizCraft."""

from __future__ import annotations

from quizcraft.core.access_gate import AccessGate
from quizcraft.core.quiz_manager import create_quiz_manager
from quizcraft.server.api_server import run_api_server
from quizcraft.utils.logging_config import configure_logging
from quizcraft.utils.settings import get_settings


def main() -> None:
    """Initialize logging and settings, then serve the quiz app."""
    settings = get_settings()
    logger = configure_logging(settings.log_level)
    logger.info("Starting QuizCraft…")

    quiz_manager = create_quiz_manager(settings)
    access_gate = AccessGate(settings.admin_code)
    if not access_gate.enabled:
        logger.warning("QUIZCRAFT_ADMIN_CODE is not set; quiz authoring is disabled")

    logger.info("Quiz page available at http://%s:%d/", settings.host, settings.port)
    run_api_server(
        quiz_manager=quiz_manager,
        access_gate=access_gate,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
