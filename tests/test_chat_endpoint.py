import uuid

from sqlalchemy import select

from mindyamsanzi.core.exceptions import GatewayError, GatewayTimeout
from mindyamsanzi.main import create_app
from mindyamsanzi.models import ChatMessage, PerformanceRecord, StudentProfile
from mindyamsanzi.utils.prompts import COUNSELOR_SYSTEM_PROMPT

from conftest import FakeGateway, auth_headers, make_settings, serve

MESSAGES = [
    {"role": "assistant", "content": "Hi! How can I help?"},
    {"role": "user", "content": "I am stressed about exams"},
]


async def _stored_messages(app):
    async with app.state.database.session() as session:
        result = await session.execute(select(ChatMessage).order_by(ChatMessage.created_at))
        return list(result.scalars().all())


async def test_missing_messages_is_rejected(client, fake_gateway):
    response = await client.post("/api/v1/ai-chat", json={"student_id": str(uuid.uuid4())})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing messages array in body"}
    assert fake_gateway.calls == []


async def test_messages_must_be_an_array(client, fake_gateway):
    response = await client.post("/api/v1/ai-chat", json={"messages": "hello"})

    assert response.status_code == 400
    assert fake_gateway.calls == []


async def test_unparseable_body_is_rejected(client):
    response = await client.post(
        "/api/v1/ai-chat",
        content=b"not json",
        headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400


async def test_empty_messages_is_rejected(client, fake_gateway):
    response = await client.post("/api/v1/ai-chat", json={"messages": []})

    assert response.status_code == 400
    assert fake_gateway.calls == []


async def test_chat_returns_reply_and_logs_exchange(app, client, fake_gateway, student_id):
    response = await client.post("/api/v1/ai-chat", json={"messages": MESSAGES, "student_id": student_id})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == fake_gateway.reply
    assert body["chat_id"].startswith("chat_")
    assert body["chat_id"].endswith(student_id)

    call = fake_gateway.calls[0]
    assert call["system_prompt"].startswith(COUNSELOR_SYSTEM_PROMPT)
    assert call["turns"] == MESSAGES
    assert call["max_tokens"] == 500

    stored = await _stored_messages(app)
    assert [(m.role, m.content) for m in stored] == [
        ("user", "I am stressed about exams"),
        ("assistant", fake_gateway.reply),
    ]
    assert all(str(m.student_id) == student_id for m in stored)


async def test_chat_enriches_prompt_with_student_context(app, client, fake_gateway, student_id):
    async with app.state.database.session() as session:
        session.add(StudentProfile(id=uuid.UUID(student_id), full_name="Lerato", location="Middelburg",
                                   municipality="Nkangala", grade=11))
        await session.commit()

    await client.post("/api/v1/ai-chat", json={"messages": MESSAGES}, headers=auth_headers(student_id))

    prompt = fake_gateway.calls[0]["system_prompt"]
    assert "- Name: Lerato" in prompt
    assert "No recent records" in prompt


async def test_body_student_id_without_token_gets_plain_prompt(app, client, fake_gateway, student_id):
    async with app.state.database.session() as session:
        session.add(StudentProfile(id=uuid.UUID(student_id), full_name="Sipho Ndlovu", location="Middelburg",
                                   school_name="Hoërskool Middelburg", grade=12))
        session.add(PerformanceRecord(student_id=uuid.UUID(student_id), subject="Mathematics", score=32))
        await session.commit()

    response = await client.post("/api/v1/ai-chat", json={"messages": MESSAGES, "student_id": student_id})

    assert response.status_code == 200
    prompt = fake_gateway.calls[0]["system_prompt"]
    assert prompt == COUNSELOR_SYSTEM_PROMPT
    assert "Sipho Ndlovu" not in prompt
    assert "Mathematics" not in prompt


async def test_anonymous_chat_is_answered_but_not_stored(app, client, fake_gateway):
    response = await client.post("/api/v1/ai-chat", json={"messages": MESSAGES})

    assert response.status_code == 200
    assert response.json()["chat_id"].endswith("_anon")
    assert fake_gateway.calls[0]["system_prompt"] == COUNSELOR_SYSTEM_PROMPT
    assert await _stored_messages(app) == []


async def test_token_subject_wins_over_body_student_id(app, client, student_id):
    other_id = str(uuid.uuid4())

    response = await client.post(
        "/api/v1/ai-chat",
        json={"messages": MESSAGES, "student_id": other_id},
        headers=auth_headers(student_id)
    )

    assert response.status_code == 200
    stored = await _stored_messages(app)
    assert {str(m.student_id) for m in stored} == {student_id}


async def test_invalid_student_id_is_rejected_before_gateway(client, fake_gateway):
    response = await client.post("/api/v1/ai-chat", json={"messages": MESSAGES, "student_id": "not-a-uuid"})

    assert response.status_code == 400
    assert fake_gateway.calls == []


async def test_gateway_timeout_maps_to_504(settings):
    app = create_app(settings, gateway=FakeGateway(error=GatewayTimeout("AI provider timeout")))
    async with serve(app) as client:
        response = await client.post("/api/v1/ai-chat", json={"messages": MESSAGES})

    assert response.status_code == 504
    assert response.json() == {"error": "AI provider timeout"}


async def test_gateway_error_maps_to_502(settings):
    app = create_app(settings, gateway=FakeGateway(error=GatewayError("AI provider error 429", status=429)))
    async with serve(app) as client:
        response = await client.post("/api/v1/ai-chat", json={"messages": MESSAGES})

    assert response.status_code == 502


async def test_unexpected_error_maps_to_500_with_details(settings):
    app = create_app(settings, gateway=FakeGateway(error=RuntimeError("something broke")))
    async with serve(app) as client:
        response = await client.post("/api/v1/ai-chat", json={"messages": MESSAGES})

    assert response.status_code == 500
    body = response.json()
    assert body["details"] == "something broke"
    assert "error" in body


async def test_upstream_500_surfaces_as_502(upstream):
    upstream.status = 500
    upstream.body = {"error": "internal"}
    app = create_app(make_settings(OPENROUTER_BASE_URL=upstream.base_url))

    async with serve(app) as client:
        response = await client.post("/api/v1/ai-chat", json={"messages": MESSAGES})

    assert response.status_code == 502
    assert response.json() == {"error": "AI provider error 500"}


async def test_hanging_upstream_surfaces_as_504(upstream):
    upstream.hang = True
    app = create_app(make_settings(OPENROUTER_BASE_URL=upstream.base_url, AI_TIMEOUT_SECONDS=0.3))

    async with serve(app) as client:
        response = await client.post("/api/v1/ai-chat", json={"messages": MESSAGES})

    assert response.status_code == 504


async def test_persistence_failure_does_not_fail_the_reply(app, client, fake_gateway, student_id):
    # drop the table so the insert fails after the reply was produced
    async with app.state.database.engine.begin() as conn:
        await conn.exec_driver_sql("DROP TABLE chat_messages")

    response = await client.post("/api/v1/ai-chat", json={"messages": MESSAGES, "student_id": student_id})

    assert response.status_code == 200
    assert response.json()["message"] == fake_gateway.reply


async def test_chat_without_data_store_skips_persistence(fake_gateway):
    app = create_app(make_settings(DATABASE_URL=""), gateway=fake_gateway)
    async with serve(app) as client:
        response = await client.post(
            "/api/v1/ai-chat",
            json={"messages": MESSAGES, "student_id": str(uuid.uuid4())}
        )

    assert response.status_code == 200
    assert fake_gateway.calls[0]["system_prompt"] == COUNSELOR_SYSTEM_PROMPT


async def test_preflight_is_answered_with_permissive_cors(client):
    response = await client.options(
        "/api/v1/ai-chat",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type",
        }
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]


async def test_chat_history_is_oldest_first(client, student_id):
    headers = auth_headers(student_id)
    await client.post("/api/v1/ai-chat", json={"messages": MESSAGES}, headers=headers)

    response = await client.get("/api/v1/chat/history", headers=headers)

    assert response.status_code == 200
    history = response.json()
    assert [m["role"] for m in history] == ["user", "assistant"]


async def test_chat_history_requires_authentication(client):
    response = await client.get("/api/v1/chat/history")
    assert response.status_code == 401
