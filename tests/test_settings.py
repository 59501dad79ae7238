from pathlib import Path

from quizcraft.core.blob_store import InMemoryBlobStore, RestBlobStore
from quizcraft.core.quiz_manager import create_quiz_manager
from quizcraft.core.remote_store import InMemoryRemoteStore, RestRemoteStore
from quizcraft.utils.settings import Settings


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    settings = Settings()
    assert settings.store_url is None
    assert settings.admin_code is None
    assert settings.port == 8000
    assert settings.local_cache_path == Path("quiz-storage.json")


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("QUIZCRAFT_STORE_URL", "https://backend.example")
    monkeypatch.setenv("QUIZCRAFT_ADMIN_CODE", "letmein")
    monkeypatch.setenv("QUIZCRAFT_PORT", "9001")

    settings = Settings()

    assert settings.store_url == "https://backend.example"
    assert settings.admin_code == "letmein"
    assert settings.port == 9001


def test_store_choice_follows_store_url(tmp_path):
    offline = create_quiz_manager(Settings(local_cache_path=tmp_path / "cache.json"))
    online = create_quiz_manager(
        Settings(store_url="https://backend.example", local_cache_path=tmp_path / "cache.json")
    )

    assert isinstance(offline._repository._remote, InMemoryRemoteStore)
    assert isinstance(offline._images._blob_store, InMemoryBlobStore)
    assert isinstance(online._repository._remote, RestRemoteStore)
    assert isinstance(online._images._blob_store, RestBlobStore)
