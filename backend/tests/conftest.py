"""Test fixtures: in-memory database, fake upstream feed, recording scheduler."""
from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["AUTH_RATE_LIMIT"] = "1000/minute"
os.environ["JWT_SECRET_KEY"] = "test-only-secret-test-only-secret-0123456789"

from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings
from app.database import Base
from app.main import create_app
from app.services.feed_client import FeedClient
from app.services.poller import Poller, PollerContext

FEED_URL = "http://feed.test/iotapp/updated/"


def plot_record(plot_id: int, name: str, **overrides: Any) -> Dict[str, Any]:
    record = {
        "id": plot_id,
        "nombre": name,
        "ubicacion": "Cancún",
        "responsable": "Juan Pérez",
        "tipo_cultivo": "Maíz",
        "ultimo_riego": "2026-10-01T08:30:00Z",
        "sensor": {"temperatura": 27.5, "humedad": 61.0},
    }
    record.update(overrides)
    return record


def feed_payload(*plots: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "sensores": {"temperatura": 30.1, "humedad": 70.0, "lluvia": 0, "sol": 85.0},
        "parcelas": list(plots),
    }


class FakeFeed:
    """httpx.MockTransport handler serving a configurable feed payload."""

    def __init__(self) -> None:
        self.payload: Any = feed_payload(plot_record(1, "Parcela A"))
        self.status_code = 200
        self.error: Optional[Exception] = None
        self.calls = 0
        self.on_request = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.on_request is not None:
            self.on_request()
        if self.error is not None:
            raise self.error
        if isinstance(self.payload, (bytes, str)):
            return httpx.Response(self.status_code, content=self.payload)
        return httpx.Response(self.status_code, json=self.payload)

    def serve(self, *plots: Dict[str, Any]) -> None:
        self.payload = feed_payload(*plots)

    def time_out(self) -> None:
        self.error = httpx.ReadTimeout("timed out", request=httpx.Request("GET", FEED_URL))


class FakeScheduler:
    """Records scheduler calls instead of running jobs."""

    def __init__(self) -> None:
        self.running = False
        self.jobs: List[Dict[str, Any]] = []
        self.shutdowns = 0

    def add_job(self, func, **kwargs) -> None:
        self.jobs.append({"func": func, **kwargs})

    def start(self) -> None:
        self.running = True

    def shutdown(self, wait: bool = True) -> None:
        self.running = False
        self.shutdowns += 1


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings() -> Settings:
    return Settings(feed_url=FEED_URL, poll_interval_seconds=120, startup_timeout_seconds=10)


@pytest.fixture
def feed() -> FakeFeed:
    return FakeFeed()


@pytest.fixture
def feed_client(feed: FakeFeed) -> FeedClient:
    return FeedClient(FEED_URL, timeout=1.0, transport=httpx.MockTransport(feed))


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def poller(settings, session_factory, feed_client, scheduler) -> Poller:
    context = PollerContext(settings=settings, session_factory=session_factory, feed_client=feed_client)
    return Poller(context, scheduler=scheduler)


@pytest.fixture
def app(settings, engine, feed_client, scheduler):
    return create_app(settings=settings, engine=engine, feed_client=feed_client, scheduler=scheduler)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client) -> Dict[str, str]:
    credentials = {"email": "agronomo@parcelas.mx", "password": "Secreto123"}
    resp = client.post("/auth/signup", json=credentials)
    assert resp.status_code == 201, resp.text
    resp = client.post("/auth/login", json=credentials)
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
