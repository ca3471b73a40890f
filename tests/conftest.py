from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
import asyncio
import uuid

import httpx
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from jose import jwt

from mindyamsanzi.core.config import Settings
from mindyamsanzi.core.database import Database
from mindyamsanzi.main import create_app

JWT_SECRET = "test-jwt-secret"


def make_settings(**overrides) -> Settings:
    values = dict(
        OPENROUTER_API_KEY="test-key",
        OPENROUTER_BASE_URL="http://upstream.invalid/api/v1",
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        JWT_SECRET=JWT_SECRET,
        AI_TIMEOUT_SECONDS=2.0,
    )
    values.update(overrides)
    return Settings(**values)


def make_token(student_id: str, role: Optional[str] = None, secret: str = JWT_SECRET) -> str:
    claims: Dict[str, Any] = {
        "sub": student_id,
        "aud": "authenticated",
        "role": "authenticated",
        "email": "student@example.com",
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    if role:
        claims["app_metadata"] = {"role": role}
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(student_id: str, role: Optional[str] = None) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(student_id, role)}"}


class FakeGateway:
    """Stands in for AIGateway; records every call"""

    def __init__(self, reply: str = "You are doing great, keep going.", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, system_prompt, turns, max_tokens=None):
        self.calls.append({"system_prompt": system_prompt, "turns": list(turns), "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.reply


class Upstream:
    """A local chat-completion server whose behaviour each test sets"""

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.release = asyncio.Event()
        self.server: Optional[TestServer] = None
        self.status = 200
        self.body: Any = {"choices": [{"message": {"role": "assistant", "content": "Hello from upstream"}}]}
        self.raw_body: Optional[str] = None
        self.hang = False

    @property
    def base_url(self) -> str:
        return str(self.server.make_url("/api/v1"))

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append({"headers": dict(request.headers), "json": await request.json()})
        if self.hang:
            try:
                await asyncio.wait_for(self.release.wait(), timeout=5)
            except asyncio.TimeoutError:
                pass
        if self.raw_body is not None:
            return web.Response(status=self.status, text=self.raw_body, content_type="application/json")
        return web.json_response(self.body, status=self.status)


@pytest.fixture
async def upstream():
    stub = Upstream()
    app = web.Application()
    app.router.add_post("/api/v1/chat/completions", stub.handle)
    stub.server = TestServer(app)
    await stub.server.start_server()
    yield stub
    stub.release.set()
    await stub.server.close()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
async def database():
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.init_db()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@asynccontextmanager
async def serve(app):
    """Client for an app built by create_app; tables are created since ASGITransport skips lifespan"""
    database = app.state.database
    if database is not None:
        await database.init_db()
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
            yield http_client
    finally:
        if database is not None:
            await database.dispose()


@pytest.fixture
async def app(settings, fake_gateway):
    application = create_app(settings, gateway=fake_gateway)
    yield application
    if application.state.database is not None:
        await application.state.database.dispose()


@pytest.fixture
async def client(app):
    async with serve(app) as http_client:
        yield http_client


@pytest.fixture
def student_id() -> str:
    return str(uuid.uuid4())
