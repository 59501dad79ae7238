"""Quiz-related constants shared across core and server layers."""

QUIZZES_TABLE: str = "quizzes"
IMAGE_BUCKET: str = "quiz-images"
LOCAL_CACHE_FILENAME: str = "quiz-storage.json"

ACCESS_LIFETIME_SECONDS: int = 24 * 60 * 60
ACCESS_COOKIE: str = "quizcraft_access_expiry"

MAX_IMAGE_BYTES: int = 5 * 1024 * 1024
ALLOWED_IMAGE_TYPES: frozenset[str] = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
)
IMAGE_CACHE_CONTROL_SECONDS: int = 3600
COMPRESSED_MAX_BYTES: int = 1024 * 1024
COMPRESSED_MAX_DIMENSION: int = 1024
COMPRESSED_QUALITY: int = 80
COMPRESSED_MIN_QUALITY: int = 40

UNANSWERED_POSITION: int = 0

# Inclusive lower bounds, checked from the top down.
VERDICT_BANDS: tuple[tuple[float, str], ...] = (
    (100.0, "perfect"),
    (80.0, "great"),
    (60.0, "good"),
)
FALLBACK_VERDICT: str = "needs practice"

COMBINED_QUIZ_ID: str = "all"
COMBINED_QUIZ_TITLE: str = "All Quizzes"
