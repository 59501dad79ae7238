"""Static metadata describing QuizCraft."""

APP_NAME = "QuizCraft"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "QuizCraft is a browser-based quiz maker built with FastAPI. "
    "Write multiple-choice, fill-in-the-blank and sequence questions, "
    "store them in a hosted table, and let anyone take them from the web."
)
