"""Provider clients against mocked transports; nothing leaves the process."""

import json
from types import SimpleNamespace

import httpx
import pytest

from careerhub.core.exceptions import UpstreamServiceError
from careerhub.services import daily_client, storage_client
from careerhub.services.archive_service import InterviewAnalysisArchive
from careerhub.services.daily_client import DailyRoomProvider
from careerhub.services.llm_client import LLMInterviewAnalyzer
from careerhub.services.storage_client import SupabaseStorage
from careerhub.services.whisper_client import WhisperTranscriber


def _daily(handler):
    return DailyRoomProvider(
        client=httpx.Client(transport=httpx.MockTransport(handler), base_url="https://api.daily.co/v1")
    )


# ============================================================
# DAILY.CO
# ============================================================

def test_create_room_enables_cloud_recording(monkeypatch):
    monkeypatch.setattr(daily_client.settings, "daily_api_key", "daily-key")
    sent = {}

    def handler(request):
        sent["path"] = request.url.path
        sent["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "r1", "name": "interview-7", "url": "https://x.daily.co/interview-7"})

    room = _daily(handler).create_room("interview-7")

    assert room.url == "https://x.daily.co/interview-7"
    assert sent["path"] == "/v1/rooms"
    assert sent["body"]["name"] == "interview-7"
    assert sent["body"]["properties"]["enable_recording"] == "cloud"


def test_create_room_without_api_key(monkeypatch):
    monkeypatch.setattr(daily_client.settings, "daily_api_key", "")

    with pytest.raises(UpstreamServiceError):
        _daily(lambda request: httpx.Response(200, json={})).create_room("interview-1")


def test_get_missing_room_returns_none():
    assert _daily(lambda request: httpx.Response(404, json={"error": "not-found"})).get_room("nope") is None


def test_daily_error_info_is_surfaced(monkeypatch):
    monkeypatch.setattr(daily_client.settings, "daily_api_key", "daily-key")
    provider = _daily(lambda request: httpx.Response(400, json={"info": "room name already exists"}))

    with pytest.raises(UpstreamServiceError) as exc:
        provider.create_room("interview-1")

    assert exc.value.message == "room name already exists"
    assert exc.value.status_code == 502


def test_recordings_and_access_link():
    def handler(request):
        if request.url.path.endswith("/access-link"):
            return httpx.Response(200, json={"download_link": "https://dl.example.com/rec.mp4"})
        assert request.url.params["room_name"] == "interview-3"
        return httpx.Response(200, json={"data": [{"id": "rec-1", "room_name": "interview-3", "start_ts": 10}]})

    provider = _daily(handler)

    assert [r.id for r in provider.list_recordings("interview-3")] == ["rec-1"]
    assert provider.get_recording_access_link("rec-1") == "https://dl.example.com/rec.mp4"


def test_unreachable_daily_is_upstream_error():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    with pytest.raises(UpstreamServiceError):
        _daily(handler).list_recordings("interview-1")


# ============================================================
# LLM ANALYSIS
# ============================================================

def _llm_returning(content):
    calls = []

    def create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return LLMInterviewAnalyzer(client=client), calls


ANALYSIS = {
    "interviewer": {"clarity_score": 8, "pacing_score": 7, "engagement_score": 9, "suggestions": "More pauses"},
    "candidate": {"clarity_score": 6, "pacing_score": 5, "engagement_score": 8, "suggestions": "Be concise"},
}


def test_analysis_parses_fenced_json():
    analyzer, calls = _llm_returning("```json\n" + json.dumps(ANALYSIS) + "\n```")

    result = analyzer.analyze("transcript text", "Erin", "Casey")

    assert result.candidate.pacing_score == 5
    assert result.interviewer.suggestions == "More pauses"
    prompt = calls[0]["messages"][0]["content"]
    assert "Erin" in prompt and "Casey" in prompt and "transcript text" in prompt


@pytest.mark.parametrize("content", [
    "I could not analyze this interview.",
    json.dumps({"interviewer": ANALYSIS["interviewer"]}),
    json.dumps({**ANALYSIS, "candidate": {**ANALYSIS["candidate"], "clarity_score": 11}}),
])
def test_unusable_analysis_is_rejected(content):
    analyzer, _ = _llm_returning(content)

    with pytest.raises(UpstreamServiceError) as exc:
        analyzer.analyze("transcript", "Erin", "Casey")

    assert exc.value.message == "Failed to parse AI feedback"


def test_empty_model_reply():
    analyzer, _ = _llm_returning("")

    with pytest.raises(UpstreamServiceError):
        analyzer.analyze("transcript", "Erin", "Casey")


# ============================================================
# WHISPER
# ============================================================

def test_transcribe_downloads_then_sends_audio():
    sent = {}

    def create(**kwargs):
        sent.update(kwargs)
        return "Hello there"

    openai_client = SimpleNamespace(audio=SimpleNamespace(transcriptions=SimpleNamespace(create=create)))
    http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"audio-bytes")))

    transcript = WhisperTranscriber(client=openai_client, http=http).transcribe("https://dl.example.com/rec.mp4")

    assert transcript == "Hello there"
    assert sent["file"].read() == b"audio-bytes"
    assert sent["response_format"] == "text"


def test_failed_download_is_upstream_error():
    http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(403)))
    transcriber = WhisperTranscriber(client=SimpleNamespace(), http=http)

    with pytest.raises(UpstreamServiceError):
        transcriber.transcribe("https://dl.example.com/expired.mp4")


# ============================================================
# STORAGE
# ============================================================

def test_storage_upload_returns_public_url(monkeypatch):
    monkeypatch.setattr(storage_client.settings, "supabase_url", "https://proj.supabase.co/")
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["upsert"] = request.headers["x-upsert"]
        seen["type"] = request.headers["content-type"]
        return httpx.Response(200, json={"Key": "documents/5/resume-1.pdf"})

    storage = SupabaseStorage(client=httpx.Client(transport=httpx.MockTransport(handler)))
    url = storage.upload("5/resume-1.pdf", b"%PDF", "application/pdf")

    assert url == "https://proj.supabase.co/storage/v1/object/public/documents/5/resume-1.pdf"
    assert seen["url"] == "https://proj.supabase.co/storage/v1/object/documents/5/resume-1.pdf"
    assert seen["upsert"] == "true"
    assert seen["type"] == "application/pdf"


def test_storage_rejection_is_upstream_error(monkeypatch):
    monkeypatch.setattr(storage_client.settings, "supabase_url", "https://proj.supabase.co")
    storage = SupabaseStorage(
        client=httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(413)))
    )

    with pytest.raises(UpstreamServiceError):
        storage.upload("5/resume-1.pdf", b"%PDF", "application/pdf")


# ============================================================
# ANALYSIS ARCHIVE
# ============================================================

class FakeCollection:
    def __init__(self):
        self.docs = []

    def insert_one(self, doc):
        doc["_id"] = f"oid-{len(self.docs)}"
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    def find(self, query):
        matches = [dict(d) for d in self.docs if all(d.get(k) == v for k, v in query.items())]
        return SimpleNamespace(sort=lambda key, direction: sorted(matches, key=lambda d: d[key], reverse=direction < 0))


def test_archive_keeps_every_run():
    collection = FakeCollection()
    archive = InterviewAnalysisArchive(collection=collection)

    first = archive.save(3, "transcript", ANALYSIS, "model-a")
    second = archive.save(3, "transcript", ANALYSIS, "model-b")

    assert first != second
    assert [d["model"] for d in collection.docs] == ["model-a", "model-b"]
    assert collection.docs[0]["interview_id"] == 3


def test_archive_lists_runs_newest_first():
    archive = InterviewAnalysisArchive(collection=FakeCollection())
    archive.save(3, "transcript", ANALYSIS, "model-a")
    archive.save(4, "other", ANALYSIS, "model-a")
    archive.save(3, "transcript", ANALYSIS, "model-b")

    runs = archive.get_by_interview(3)

    assert [r["model"] for r in runs] == ["model-b", "model-a"]
    assert all(isinstance(r["_id"], str) for r in runs)
