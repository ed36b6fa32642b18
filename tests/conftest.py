"""Shared test fixtures: per-test SQLite DB file + app + test client."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from notespace.core.config import Settings
from notespace.core.database import init_db
from notespace.core.security import TokenService
from notespace.main import create_app
from notespace.services.store import NotesStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'notespace.db'}",
        jwt_secret_key="test-secret-key",
        free_note_limit=3,
    )


@pytest.fixture
async def app(settings) -> AsyncGenerator[FastAPI, None]:
    application = create_app(settings)
    # ASGITransport does not run lifespan events
    await init_db(application.state.engine)
    yield application
    await application.state.engine.dispose()


@pytest.fixture
def store(app) -> NotesStore:
    return app.state.store


@pytest.fixture
def tokens(app) -> TokenService:
    return app.state.tokens


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX async test client bound to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
