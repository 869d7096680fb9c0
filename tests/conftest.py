"""Shared pytest fixtures and configuration."""

import os
import pytest
from datetime import datetime, timedelta, timezone

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")

from src.models.todo import SchemaCapabilities
from src.services.todo_store import TodoStore
from tests.utils.fake_supabase import FakeSupabaseClient


class SteppingClock:
    """Clock that advances one second per call, for deterministic created_at ordering."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def clock():
    return SteppingClock(datetime(2024, 12, 9, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def fake_client():
    """Fake Supabase client whose todos table has the step column."""
    return FakeSupabaseClient(has_step=True)


@pytest.fixture
def fake_client_without_step():
    """Fake Supabase client with an older schema (no step column)."""
    return FakeSupabaseClient(has_step=False)


@pytest.fixture
def store(fake_client, clock):
    return TodoStore(fake_client, SchemaCapabilities(has_step=True), table="todos", clock=clock)


@pytest.fixture
def store_without_step(fake_client_without_step, clock):
    return TodoStore(
        fake_client_without_step,
        SchemaCapabilities(has_step=False),
        table="todos",
        clock=clock,
    )


@pytest.fixture
def production_environment(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")


@pytest.fixture
def webhook_url(monkeypatch):
    url = "https://hooks.example.com/todos"
    monkeypatch.setenv("WEBHOOK_URL", url)
    return url
