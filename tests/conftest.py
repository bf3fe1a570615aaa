"""
Shared fixtures.

The app is pointed at a throwaway SQLite file before anything from
careerhub is imported, and every test starts from empty tables. Users are
inserted directly and authenticated with freshly minted tokens; external
providers are replaced with in-memory fakes through dependency overrides.
"""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="careerhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'careerhub.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret"

from datetime import datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import text  # noqa: E402

from careerhub.core.auth import create_access_token  # noqa: E402
from careerhub.core.exceptions import UpstreamServiceError  # noqa: E402
from careerhub.db.postgres import engine, get_db_session  # noqa: E402
from careerhub.db.schema import reset_db  # noqa: E402
from careerhub.main import app  # noqa: E402
from careerhub.models.providers import AnalysisResult, ParticipantScores, Recording, VideoRoom  # noqa: E402
from careerhub.services.archive_service import get_analysis_archive  # noqa: E402
from careerhub.services.daily_client import get_room_provider  # noqa: E402
from careerhub.services.llm_client import get_interview_analyzer  # noqa: E402
from careerhub.services.providers import (  # noqa: E402
    DocumentStorage, InterviewAnalyzer, RoomProvider, Transcriber,
)
from careerhub.services.storage_client import get_document_storage  # noqa: E402
from careerhub.services.whisper_client import get_transcriber  # noqa: E402


# ============================================================
# FAKE PROVIDERS
# ============================================================

class FakeRoomProvider(RoomProvider):
    def __init__(self):
        self.rooms = {}
        self.recordings = {}
        self.create_calls = 0
        self.fail_with = None

    def create_room(self, name):
        if self.fail_with:
            raise UpstreamServiceError(self.fail_with, provider="daily")
        self.create_calls += 1
        room = VideoRoom(id=f"id-{name}", name=name, url=f"https://careerhub.daily.co/{name}")
        self.rooms[name] = room
        return room

    def get_room(self, name):
        return self.rooms.get(name)

    def list_recordings(self, room_name):
        return self.recordings.get(room_name, [])

    def get_recording_access_link(self, recording_id):
        return f"https://recordings.example.com/{recording_id}.mp4"

    def add_recording(self, room_name, recording_id, start_ts):
        self.recordings.setdefault(room_name, []).append(
            Recording(id=recording_id, room_name=room_name, start_ts=start_ts)
        )


class FakeTranscriber(Transcriber):
    def __init__(self):
        self.transcript = "Interviewer: Tell me about yourself. Candidate: I build APIs."
        self.urls = []
        self.fail_with = None

    def transcribe(self, audio_url):
        self.urls.append(audio_url)
        if self.fail_with:
            raise UpstreamServiceError(self.fail_with, provider="whisper")
        return self.transcript


class FakeAnalyzer(InterviewAnalyzer):
    def __init__(self):
        self.calls = []
        self.fail_with = None

    def analyze(self, transcript, interviewer_name, candidate_name):
        self.calls.append((transcript, interviewer_name, candidate_name))
        if self.fail_with:
            raise UpstreamServiceError(self.fail_with, provider="llm")
        return AnalysisResult(
            interviewer=ParticipantScores(
                clarity_score=8, pacing_score=7, engagement_score=9, suggestions="Ask follow-up questions."
            ),
            candidate=ParticipantScores(
                clarity_score=6, pacing_score=5, engagement_score=8, suggestions="Slow down a little."
            ),
        )


class FakeArchive:
    def __init__(self):
        self.saved = []

    def save(self, interview_id, transcript, analysis, model):
        self.saved.append({"interview_id": interview_id, "transcript": transcript, "analysis": analysis})
        return "archived-id"


class FakeStorage(DocumentStorage):
    def __init__(self):
        self.objects = {}

    def upload(self, path, content, content_type):
        self.objects[path] = (content, content_type)
        return f"https://storage.example.com/public/documents/{path}"


@pytest.fixture
def providers():
    fakes = {
        "rooms": FakeRoomProvider(),
        "transcriber": FakeTranscriber(),
        "analyzer": FakeAnalyzer(),
        "archive": FakeArchive(),
        "storage": FakeStorage(),
    }
    app.dependency_overrides[get_room_provider] = lambda: fakes["rooms"]
    app.dependency_overrides[get_transcriber] = lambda: fakes["transcriber"]
    app.dependency_overrides[get_interview_analyzer] = lambda: fakes["analyzer"]
    app.dependency_overrides[get_analysis_archive] = lambda: fakes["archive"]
    app.dependency_overrides[get_document_storage] = lambda: fakes["storage"]
    return fakes


# ============================================================
# DATABASE & CLIENT
# ============================================================

@pytest.fixture(autouse=True)
def clean_db():
    reset_db(engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


def auth_headers(user_id: int) -> dict:
    token = create_access_token({"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


class Factory:
    """Inserts rows directly, bypassing the API."""

    def __init__(self):
        self._seq = 0

    def _insert(self, sql: str, params: dict) -> int:
        with get_db_session() as db:
            return db.execute(text(sql), params).scalar_one()

    def company(self, name="Acme Corp", **kw):
        return self._insert(
            "INSERT INTO companies (name, logo, website, description) "
            "VALUES (:name, :logo, :website, :description) RETURNING company_id",
            {"name": name, "logo": kw.get("logo"), "website": kw.get("website"),
             "description": kw.get("description")}
        )

    def user(self, role="STUDENT", name=None, company_id=None):
        self._seq += 1
        name = name or f"{role.title()} {self._seq}"
        return self._insert(
            "INSERT INTO users (email, name, password_hash, role, company_id) "
            "VALUES (:email, :name, 'not-a-real-hash', :role, :cid) RETURNING user_id",
            {"email": f"user{self._seq}@example.com", "name": name, "role": role, "cid": company_id}
        )

    def student(self, name=None):
        return self.user("STUDENT", name)

    def employer(self, company_id, name=None):
        return self.user("EMPLOYER", name, company_id)

    def admin(self, name=None):
        return self.user("ADMIN", name)

    def job(self, company_id, title="Backend Engineer", description="Build services", job_type="FULL_TIME",
            is_active=True, created_at=None, **requires):
        return self._insert(
            """
            INSERT INTO jobs (company_id, title, description, job_type, is_active,
                requires_resume, requires_cover_letter, requires_transcript, created_at)
            VALUES (:cid, :title, :description, :job_type, :is_active,
                :rr, :rcl, :rt, :created_at)
            RETURNING job_id
            """,
            {
                "cid": company_id, "title": title, "description": description, "job_type": job_type,
                "is_active": is_active, "rr": requires.get("requires_resume", False),
                "rcl": requires.get("requires_cover_letter", False),
                "rt": requires.get("requires_transcript", False),
                "created_at": created_at or datetime(2026, 1, 1) + timedelta(minutes=self._next()),
            }
        )

    def application(self, job_id, user_id, status="PENDING"):
        return self._insert(
            "INSERT INTO applications (job_id, user_id, status) VALUES (:jid, :uid, :status) "
            "RETURNING application_id",
            {"jid": job_id, "uid": user_id, "status": status}
        )

    def interview(self, application_id, status="PENDING_RESPONSE", room_name=None, room_url=None,
                  transcription=None):
        return self._insert(
            """
            INSERT INTO interviews (application_id, duration, status, room_name, room_url, transcription,
                created_at)
            VALUES (:aid, 30, :status, :room_name, :room_url, :transcription, :created_at)
            RETURNING interview_id
            """,
            {"aid": application_id, "status": status, "room_name": room_name, "room_url": room_url,
             "transcription": transcription,
             "created_at": datetime(2026, 2, 1) + timedelta(minutes=self._next())}
        )

    def slot(self, interview_id, start_time):
        return self._insert(
            "INSERT INTO interview_time_slots (interview_id, start_time, selected) "
            "VALUES (:iid, :start, FALSE) RETURNING slot_id",
            {"iid": interview_id, "start": start_time}
        )

    def review(self, application_id, reviewer_id, company_id, overall=4, was_ghosted=False, **ratings):
        return self._insert(
            """
            INSERT INTO reviews (application_id, reviewer_id, company_id, responsiveness, transparency,
                professionalism, interview_experience, overall, was_ghosted, comment)
            VALUES (:aid, :rid, :cid, :responsiveness, :transparency, :professionalism,
                :interview_experience, :overall, :was_ghosted, :comment)
            RETURNING review_id
            """,
            {
                "aid": application_id, "rid": reviewer_id, "cid": company_id,
                "responsiveness": ratings.get("responsiveness", 4),
                "transparency": ratings.get("transparency", 4),
                "professionalism": ratings.get("professionalism", 4),
                "interview_experience": ratings.get("interview_experience", 4),
                "overall": overall, "was_ghosted": was_ghosted, "comment": ratings.get("comment"),
            }
        )

    def reviewed_application(self, company_id, overall=4, was_ghosted=False, reviewer_name=None, **ratings):
        """A student, a job application with a completed interview, and their review."""
        student_id = self.student(reviewer_name)
        job_id = self.job(company_id)
        app_id = self.application(job_id, student_id, "INTERVIEW")
        self.interview(app_id, "COMPLETED")
        return self.review(app_id, student_id, company_id, overall=overall, was_ghosted=was_ghosted, **ratings)

    def _next(self) -> int:
        self._seq += 1
        return self._seq


@pytest.fixture
def factory():
    return Factory()


def query(sql: str, params: dict = None) -> list:
    with get_db_session() as db:
        result = db.execute(text(sql), params or {})
        return [dict(row._mapping) for row in result.fetchall()]


@pytest.fixture
def auth():
    return auth_headers


@pytest.fixture
def db_query():
    return query
