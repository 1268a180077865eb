"""API tests for the Emotion Companion service."""
import pytest
from httpx import ASGITransport, AsyncClient

from emotion_companion.main import create_app
from emotion_companion.providers import ProviderChain

from helpers import FakeProvider


async def start_session(async_client, name="Layla"):
    user = (await async_client.post("/api/users", json={"name": name})).json()
    response = await async_client.post("/api/sessions", json={"user_id": user["id"]})
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_health_endpoint(async_client):
    """Test health check endpoint."""
    response = await async_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "emotion-companion"
    assert [p["name"] for p in data["providers"]] == ["remote", "local"]


@pytest.mark.asyncio
async def test_create_user_is_get_or_create(async_client):
    first = await async_client.post("/api/users", json={"name": "Nour", "age": 25})
    second = await async_client.post("/api/users", json={"name": "Nour"})

    assert first.status_code == 200
    assert first.json()["id"] == second.json()["id"]


@pytest.mark.asyncio
async def test_create_user_validation_error(async_client):
    response = await async_client.post("/api/users", json={"name": ""})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_session_lifecycle(async_client):
    session = await start_session(async_client)

    fetched = await async_client.get(f"/api/sessions/{session['id']}")
    assert fetched.json()["is_active"] is True

    ended = await async_client.post(f"/api/sessions/{session['id']}/end")
    assert ended.status_code == 200
    assert ended.json()["is_active"] is False
    assert ended.json()["end_time"] is not None


@pytest.mark.asyncio
async def test_session_for_unknown_user(async_client):
    response = await async_client.post("/api/sessions", json={"user_id": "ghost"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_session_is_404(async_client):
    response = await async_client.get("/api/sessions/missing")

    assert response.status_code == 404
    assert response.json()["code"] == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_save_and_list_emotion_samples(async_client):
    session = await start_session(async_client)

    saved = await async_client.post(
        "/api/emotions",
        json={
            "session_id": session["id"],
            "emotions": {"happy": 70, "sad": 5},
            "age": 27,
            "gender": "female",
        },
    )
    assert saved.status_code == 201
    assert saved.json()["confidence"] == 85

    listed = await async_client.get(f"/api/sessions/{session['id']}/emotions")
    samples = listed.json()
    assert len(samples) == 1
    assert samples[0]["emotions"]["happy"] == 70
    assert samples[0]["emotions"]["neutral"] == 0


@pytest.mark.asyncio
async def test_malformed_emotions_saved_as_neutral(async_client):
    session = await start_session(async_client)

    saved = await async_client.post(
        "/api/emotions",
        json={"session_id": session["id"], "emotions": {"happy": "lots"}, "confidence": 50},
    )

    assert saved.status_code == 201
    assert saved.json()["emotions"]["neutral"] == 100
    assert saved.json()["confidence"] == 50


@pytest.mark.asyncio
async def test_save_emotion_for_unknown_session(async_client):
    response = await async_client.post(
        "/api/emotions", json={"session_id": "missing", "emotions": {"happy": 1}}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_detections_feed_live_summary(async_client):
    session = await start_session(async_client)
    url = f"/api/sessions/{session['id']}/detections"

    await async_client.post(url, json={"emotions": {"sad": 80, "happy": 10}})
    pushed = await async_client.post(url, json={"emotions": {"sad": 60, "happy": 30}})

    assert pushed.status_code == 200
    assert pushed.json()["live"]["sample_count"] == 2

    live = (await async_client.get(f"/api/sessions/{session['id']}/live")).json()
    assert live["dominant"]["channel"] == "sad"
    assert live["average"]["sad"] == 70


@pytest.mark.asyncio
async def test_chat_endpoint(async_client):
    session = await start_session(async_client)

    response = await async_client.post(
        "/api/chat",
        json={
            "session_id": session["id"],
            "content": "I had a rough day",
            "emotion_context": {"sad": 90},
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["provider"] == "remote"
    assert data["ai_message"]["content"] == "reply from remote"
    assert data["user_message"]["emotion_context"]["sad"] == 90

    messages = (await async_client.get(f"/api/sessions/{session['id']}/messages")).json()
    assert [m["is_user"] for m in messages] == [True, False]


@pytest.mark.asyncio
async def test_chat_validation_error(async_client):
    response = await async_client.post("/api/chat", json={"session_id": "x", "content": ""})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_chat_unknown_session(async_client):
    response = await async_client.post(
        "/api/chat", json={"session_id": "missing", "content": "hello"}
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_chat_exhausted_chain_is_500(settings, storage):
    chain = ProviderChain([FakeProvider("tail", guaranteed=True, error=RuntimeError("down"))])
    app = create_app(settings=settings, storage=storage, chain=chain)
    session = await storage.create_session()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            "/api/chat", json={"session_id": session.id, "content": "hello"}
        )

    assert response.status_code == 500
    assert response.json()["code"] == "PROVIDERS_EXHAUSTED"


@pytest.mark.asyncio
async def test_session_stats(async_client):
    session = await start_session(async_client)
    for emotions in ({"happy": 80, "sad": 70}, {"happy": 80, "sad": 70}):
        await async_client.post(
            "/api/emotions",
            json={"session_id": session["id"], "emotions": emotions, "confidence": 90},
        )
    await async_client.post(
        "/api/chat", json={"session_id": session["id"], "content": "hi"}
    )

    response = await async_client.get(f"/api/sessions/{session['id']}/stats")

    assert response.status_code == 200
    stats = response.json()
    assert stats["detections"] == 2
    assert stats["dominant_emotion"] == "happy"
    assert stats["emotion_totals"]["happy"] == 160
    assert stats["average_confidence"] == 90
    assert stats["message_count"] == 2
    assert stats["duration"] >= 0


@pytest.mark.asyncio
async def test_list_providers(async_client):
    response = await async_client.get("/api/ai-providers")

    assert response.status_code == 200
    assert response.json()["providers"] == [
        {"name": "remote", "configured": True},
        {"name": "local", "configured": True},
    ]


@pytest.mark.asyncio
async def test_test_provider_endpoint(async_client):
    auto = await async_client.post("/api/test-ai-provider", json={})
    local = await async_client.post(
        "/api/test-ai-provider", json={"provider": "local", "emotions": {"happy": 90}}
    )

    assert auto.json()["success"] is True
    assert auto.json()["provider"] == "remote"
    assert local.json()["success"] is True
    assert local.json()["provider"] == "local"


@pytest.mark.asyncio
async def test_test_unknown_provider_is_404(async_client):
    response = await async_client.post("/api/test-ai-provider", json={"provider": "nope"})

    assert response.status_code == 404
    assert response.json()["code"] == "PROVIDER_NOT_FOUND"


@pytest.mark.asyncio
async def test_stats_with_naive_and_aware_timestamps(async_client):
    session = await start_session(async_client)
    await async_client.post(
        "/api/emotions", json={"session_id": session["id"], "emotions": {"happy": 40}}
    )
    saved = await async_client.post(
        "/api/emotions",
        json={
            "session_id": session["id"],
            "emotions": {"sad": 60},
            "captured_at": "2024-01-01T00:00:00",
        },
    )
    assert saved.json()["captured_at"] == "2024-01-01T00:00:00+00:00"

    response = await async_client.get(f"/api/sessions/{session['id']}/stats")

    assert response.status_code == 200
    stats = response.json()
    assert stats["detections"] == 2
    assert stats["latest_emotions"]["happy"] == 40


@pytest.mark.asyncio
async def test_chat_with_oversized_emotion_value(async_client):
    session = await start_session(async_client)

    response = await async_client.post(
        "/api/chat",
        json={
            "session_id": session["id"],
            "content": "hello",
            "emotion_context": {"happy": 10**400},
        },
    )

    assert response.status_code == 200
    assert response.json()["user_message"]["emotion_context"]["neutral"] == 100
