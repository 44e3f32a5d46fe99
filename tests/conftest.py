import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["SEED_DEFAULTS"] = "false"

import pytest
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine

from app.db.session import build_sessionmaker, init_db
from main import app


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'chatbot.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessionmaker(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def db(sessionmaker):
    async with sessionmaker() as session:
        yield session


@pytest.fixture
async def client(sessionmaker):
    # Stands in for the lifespan, which ASGITransport does not run
    app.state.sessionmaker = sessionmaker
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def make_token(role: str = "admin", sub: str = "admin-1") -> str:
    return jwt.encode(
        {"sub": sub, "role": "authenticated", "app_metadata": {"role": role}},
        "test-secret",
        algorithm="HS256",
    )


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def visitor_headers():
    return {"Authorization": f"Bearer {make_token(role='user', sub='someone')}"}
