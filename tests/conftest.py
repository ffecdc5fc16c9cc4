"""Pytest configuration."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from chatdesk.core.chat_proxy import ChatProxyClient
from chatdesk.core.config import Settings
from chatdesk.storage.record_store import RecordStore


class FakeClock:
    """Deterministic clock; every reading advances by ``step``."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + self.step
        return now

    def freeze(self) -> None:
        self.step = timedelta(0)

    def set(self, value: datetime) -> None:
        self.current = value


@pytest.fixture(autouse=True)
def mock_settings(monkeypatch):
    """Keep tests independent of the developer's environment."""
    monkeypatch.delenv("CHAT_API_URL", raising=False)
    monkeypatch.delenv("CHAT_API_KEY", raising=False)
    monkeypatch.setenv("CHATDESK_ENVIRONMENT", "test")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def store(data_dir: Path, clock: FakeClock) -> RecordStore:
    return RecordStore(data_dir, clock=clock)


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(
        data_dir=data_dir,
        chat_api_url="http://upstream.test/chat",
        chat_api_key="test-key",
    )


@pytest.fixture
def client(settings: Settings, store: RecordStore):
    """Test client over an isolated data directory."""
    from chatdesk.main import create_app

    app = create_app(
        settings,
        store=store,
        chat_proxy=ChatProxyClient.from_settings(settings),
    )
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
