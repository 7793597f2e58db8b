import inspect
import json

import pytest

from flashcoach import config
from flashcoach.routes import flashcards as flashcard_routes
from flashcoach.routes import speaking as speaking_routes
from flashcoach.services import llm_flashcards, speaking_coach
from flashcoach.utils.errors import EmptyResponse, UpstreamError


def make_cards(count):
    return [{"question": f"Question {i}?", "answer": f"Answer {i}"} for i in range(1, count + 1)]


def fake_chat(cards_reply, title_reply='"Photosynthesis"', calls=None):
    async def run_chat_completion(messages, *, title="Flashcoach"):
        if calls is not None:
            calls.append(title)
        if title == "Title Generator":
            if isinstance(title_reply, Exception):
                raise title_reply
            return title_reply
        if isinstance(cards_reply, Exception):
            raise cards_reply
        return cards_reply

    return run_chat_completion


# -------------------------------------------------------------------
# Service status
# -------------------------------------------------------------------
def test_root_and_health(client, api_keys):
    assert client.get("/").json()["status"] == "ok"

    body = client.get("/health/").json()

    assert body["status"] == "ok"
    assert body["credentials"] == {"chat": True, "audio": True}
    assert body["models"]["chat"] == config.CHAT_MODEL


def test_health_reports_missing_credentials(client, monkeypatch):
    monkeypatch.setattr(config, "OPENROUTER_API_KEY", "test-openrouter-key")
    monkeypatch.setattr(config, "OPENAI_API_KEY", None)

    response = client.get("/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["credentials"] == {"chat": True, "audio": False}
    assert "test-openrouter-key" not in response.text


# -------------------------------------------------------------------
# Flashcards
# -------------------------------------------------------------------
def test_generate_saves_set_with_title(client, history, monkeypatch):
    calls = []
    reply = "```json\n" + json.dumps(make_cards(5)) + "\n```"
    monkeypatch.setattr(llm_flashcards, "run_chat_completion", fake_chat(reply, calls=calls))

    response = client.post(
        "/flashcards/generate",
        json={"content": "Plants make sugar from light.", "language": "en", "scenario": "study", "count": 5},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["flashcards"] == make_cards(5)
    assert body["set"]["title"] == "Photosynthesis"
    assert body["set"]["language"] == "en"
    assert "createdAt" in body["set"]
    assert calls == ["Flashcard Generator", "Title Generator"]
    assert [s.id for s in history.all()] == [body["set"]["id"]]


def test_generate_without_save_skips_title_and_history(client, history, monkeypatch):
    calls = []
    monkeypatch.setattr(llm_flashcards, "run_chat_completion", fake_chat(json.dumps(make_cards(10)), calls=calls))

    response = client.post("/flashcards/generate", json={"content": "material", "save": False})

    assert response.status_code == 200
    assert response.json()["set"] is None
    assert calls == ["Flashcard Generator"]
    assert history.all() == []


def test_generate_falls_back_when_title_fails(client, monkeypatch):
    monkeypatch.setattr(
        llm_flashcards,
        "run_chat_completion",
        fake_chat(json.dumps(make_cards(4)), title_reply=EmptyResponse()),
    )

    response = client.post("/flashcards/generate", json={"content": "material", "count": "auto"})

    assert response.status_code == 200
    assert response.json()["set"]["title"] == "Untitled set"


def test_generate_wrong_count_is_reported(client, history, monkeypatch):
    monkeypatch.setattr(llm_flashcards, "run_chat_completion", fake_chat(json.dumps(make_cards(4))))

    response = client.post("/flashcards/generate", json={"content": "material", "count": 5})

    assert response.status_code == 502
    assert response.json()["code"] == "unexpected_count"
    assert history.all() == []


def test_generate_unparseable_reply(client, monkeypatch):
    monkeypatch.setattr(llm_flashcards, "run_chat_completion", fake_chat("I cannot help with that."))

    response = client.post("/flashcards/generate", json={"content": "material"})

    assert response.status_code == 502
    assert response.json()["code"] == "parse_failure"


def test_generate_upstream_error(client, monkeypatch):
    monkeypatch.setattr(llm_flashcards, "run_chat_completion", fake_chat(UpstreamError()))

    response = client.post("/flashcards/generate", json={"content": "material"})

    assert response.status_code == 502
    assert response.json()["code"] == "upstream_error"


def test_generate_without_credential(client, monkeypatch):
    monkeypatch.setattr(config, "OPENROUTER_API_KEY", None)

    response = client.post("/flashcards/generate", json={"content": "material"})

    assert response.status_code == 500
    assert response.json()["code"] == "missing_credential"


def test_generate_rejects_blank_content(client):
    response = client.post("/flashcards/generate", json={"content": "   "})

    assert response.status_code == 400


@pytest.mark.parametrize("payload", [{"content": "m", "count": 0}, {"content": "m", "scenario": "party"}])
def test_generate_rejects_bad_parameters(client, payload):
    assert client.post("/flashcards/generate", json=payload).status_code == 422


def test_title_endpoint(client, monkeypatch):
    monkeypatch.setattr(llm_flashcards, "run_chat_completion", fake_chat("", title_reply="《光合作用》\n"))

    response = client.post("/flashcards/title", json={"content": "植物利用光合成糖。"})

    assert response.status_code == 200
    assert response.json() == {"title": "光合作用"}


def test_history_endpoints(client, monkeypatch):
    monkeypatch.setattr(llm_flashcards, "run_chat_completion", fake_chat(json.dumps(make_cards(10))))
    created = client.post("/flashcards/generate", json={"content": "material"}).json()["set"]

    listed = client.get("/flashcards/sets").json()
    fetched = client.get(f"/flashcards/sets/{created['id']}")
    deleted = client.delete(f"/flashcards/sets/{created['id']}")

    assert [s["id"] for s in listed] == [created["id"]]
    assert fetched.json() == created
    assert deleted.json() == {"status": "ok", "id": created["id"]}
    assert client.get(f"/flashcards/sets/{created['id']}").status_code == 404
    assert client.delete(f"/flashcards/sets/{created['id']}").status_code == 404


@pytest.mark.parametrize("handler", ["list_sets", "get_set", "delete_set"])
def test_history_handlers_run_off_the_event_loop(handler):
    # plain def handlers are dispatched to FastAPI's threadpool
    assert not inspect.iscoroutinefunction(getattr(flashcard_routes, handler))


# -------------------------------------------------------------------
# Speaking
# -------------------------------------------------------------------
def test_analyze_speaking(client, monkeypatch):
    reply = json.dumps(
        {
            "grammarErrors": [
                {"original": "I go store", "corrected": "I went to the store", "explanation": "past tense"},
                {"original": "i go STORE", "corrected": "dup", "explanation": "dup"},
            ],
            "suggestions": ["Speak slower"],
            "overallFeedback": "Nice try.",
        }
    )

    async def run_chat_completion(messages, *, title="Flashcoach"):
        return reply

    monkeypatch.setattr(speaking_coach, "run_chat_completion", run_chat_completion)

    response = client.post(
        "/speaking/analyze",
        json={"transcription": "I go store", "question": "Where did you go?", "answer": "I went to the store."},
    )

    assert response.status_code == 200
    assert response.json() == {
        "transcription": "I go store",
        "grammarErrors": [
            {"original": "I go store", "corrected": "I went to the store", "explanation": "past tense"}
        ],
        "suggestions": ["Speak slower"],
        "overallFeedback": "Nice try.",
    }


def test_analyze_speaking_incomplete_feedback(client, monkeypatch):
    async def run_chat_completion(messages, *, title="Flashcoach"):
        return '{"grammarErrors": [], "suggestions": []}'

    monkeypatch.setattr(speaking_coach, "run_chat_completion", run_chat_completion)

    response = client.post("/speaking/analyze", json={"transcription": "Hello"})

    assert response.status_code == 502
    assert response.json()["code"] == "invalid_structure"


def test_analyze_speaking_requires_transcription(client):
    assert client.post("/speaking/analyze", json={"transcription": " "}).status_code == 400


def test_transcribe(client, monkeypatch):
    received = {}

    async def transcribe_audio(data, filename="audio.webm", content_type="audio/webm"):
        received.update(data=data, filename=filename, content_type=content_type)
        return "I went to the store."

    monkeypatch.setattr(speaking_routes, "transcribe_audio", transcribe_audio)

    response = client.post(
        "/speaking/transcribe",
        files={"audio": ("answer.webm", b"webm-bytes", "audio/webm")},
    )

    assert response.status_code == 200
    assert response.json() == {"transcription": "I went to the store."}
    assert received == {"data": b"webm-bytes", "filename": "answer.webm", "content_type": "audio/webm"}


def test_transcribe_rejects_empty_upload(client):
    response = client.post("/speaking/transcribe", files={"audio": ("empty.webm", b"", "audio/webm")})

    assert response.status_code == 400


def test_speech_returns_mp3(client, monkeypatch):
    async def synthesize_speech(text):
        return b"ID3" + text.encode()

    monkeypatch.setattr(speaking_routes, "synthesize_speech", synthesize_speech)

    response = client.post("/speaking/speech", json={"text": "Hi"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.content == b"ID3Hi"


def test_speech_empty_response_is_reported(client, monkeypatch):
    async def synthesize_speech(text):
        raise EmptyResponse()

    monkeypatch.setattr(speaking_routes, "synthesize_speech", synthesize_speech)

    response = client.post("/speaking/speech", json={"text": "Hi"})

    assert response.status_code == 502
    assert response.json()["code"] == "empty_response"
