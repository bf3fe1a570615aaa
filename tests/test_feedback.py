import pytest

from careerhub.services.feedback_service import FeedbackPipeline
from conftest import FakeTranscriber


@pytest.fixture
def completed(factory):
    company = factory.company()
    employer = factory.employer(company, "Erin Employer")
    factory.employer(company, "Second Employee")
    student = factory.student("Sam Student")
    app_id = factory.application(factory.job(company), student, "INTERVIEW")
    interview_id = factory.interview(app_id, "COMPLETED", room_name="interview-x", room_url="https://d/x")
    return {"employer": employer, "student": student, "interview": interview_id}


def test_generates_feedback_for_both_participants(client, auth, completed, providers, db_query):
    providers["rooms"].add_recording("interview-x", "rec-old", start_ts=100)
    providers["rooms"].add_recording("interview-x", "rec-new", start_ts=200)

    response = client.post(f"/api/interviews/{completed['interview']}/analyze", headers=auth(completed["student"]))

    assert response.status_code == 200
    body = response.json()
    assert body["feedback"]["recipient_role"] == "STUDENT"
    assert body["feedback"]["clarity_score"] == 6

    # Most recent recording is transcribed
    assert providers["transcriber"].urls == ["https://recordings.example.com/rec-new.mp4"]
    # First employee of the company is named as interviewer
    assert providers["analyzer"].calls[0][1:] == ("Erin Employer", "Sam Student")

    rows = db_query("SELECT recipient_id, recipient_role FROM interview_feedback ORDER BY recipient_role")
    assert rows == [
        {"recipient_id": completed["employer"], "recipient_role": "EMPLOYER"},
        {"recipient_id": completed["student"], "recipient_role": "STUDENT"},
    ]
    assert db_query("SELECT transcription FROM interviews")[0]["transcription"] == providers["transcriber"].transcript
    assert providers["archive"].saved[0]["interview_id"] == completed["interview"]


def test_second_run_is_a_noop(client, auth, completed, providers, db_query):
    providers["rooms"].add_recording("interview-x", "rec", start_ts=1)
    client.post(f"/api/interviews/{completed['interview']}/analyze", headers=auth(completed["student"]))

    again = client.post(f"/api/interviews/{completed['interview']}/analyze", headers=auth(completed["employer"]))

    assert again.status_code == 200
    assert again.json()["message"] == "Feedback already generated"
    assert len(providers["analyzer"].calls) == 1
    assert len(db_query("SELECT * FROM interview_feedback")) == 2


def test_no_recording(client, auth, completed, providers, db_query):
    response = client.post(f"/api/interviews/{completed['interview']}/analyze", headers=auth(completed["student"]))

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "No recording found"
    assert db_query("SELECT * FROM interview_feedback") == []


def test_no_room(client, auth, factory, providers):
    student = factory.student()
    app_id = factory.application(factory.job(factory.company()), student)
    interview_id = factory.interview(app_id, "COMPLETED")

    response = client.post(f"/api/interviews/{interview_id}/analyze", headers=auth(student))

    assert response.status_code == 400


def test_transcription_failure(client, auth, completed, providers, db_query):
    providers["rooms"].add_recording("interview-x", "rec", start_ts=1)
    providers["transcriber"].fail_with = "audio too long"

    response = client.post(f"/api/interviews/{completed['interview']}/analyze", headers=auth(completed["student"]))

    assert response.status_code == 502
    assert response.json()["error"]["message"] == "Analysis failed: audio too long"
    assert db_query("SELECT transcription FROM interviews")[0]["transcription"] is None
    assert db_query("SELECT * FROM interview_feedback") == []


def test_analysis_failure_keeps_transcript(client, auth, completed, providers, db_query):
    providers["rooms"].add_recording("interview-x", "rec", start_ts=1)
    providers["analyzer"].fail_with = "Failed to parse AI feedback"

    response = client.post(f"/api/interviews/{completed['interview']}/analyze", headers=auth(completed["student"]))

    assert response.status_code == 502
    assert response.json()["error"]["message"] == "Analysis failed: Failed to parse AI feedback"
    assert db_query("SELECT transcription FROM interviews")[0]["transcription"] is not None
    assert db_query("SELECT * FROM interview_feedback") == []

    # Retrying after the provider recovers succeeds
    providers["analyzer"].fail_with = None
    retry = client.post(f"/api/interviews/{completed['interview']}/analyze", headers=auth(completed["student"]))
    assert retry.status_code == 200


def test_outsider_cannot_analyze(client, auth, factory, completed, providers):
    response = client.post(f"/api/interviews/{completed['interview']}/analyze", headers=auth(factory.student()))
    assert response.status_code == 401


def test_feedback_view_shows_only_own_rows(client, auth, completed, providers):
    providers["rooms"].add_recording("interview-x", "rec", start_ts=1)
    client.post(f"/api/interviews/{completed['interview']}/analyze", headers=auth(completed["student"]))

    student_view = client.get(
        f"/api/interviews/{completed['interview']}/feedback", headers=auth(completed["student"])
    ).json()
    employer_view = client.get(
        f"/api/interviews/{completed['interview']}/feedback", headers=auth(completed["employer"])
    ).json()

    assert [f["recipient_role"] for f in student_view["feedback"]] == ["STUDENT"]
    assert [f["recipient_role"] for f in employer_view["feedback"]] == ["EMPLOYER"]
    assert student_view["transcription"] == providers["transcriber"].transcript


def test_overlapping_runs_write_one_row_per_participant(completed, providers, db_query):
    company_id = db_query("SELECT company_id FROM users WHERE user_id = :id", {"id": completed["employer"]})[0]
    employer = {"user_id": completed["employer"], "role": "EMPLOYER", **company_id}
    student = {"user_id": completed["student"], "role": "STUDENT", "company_id": None}
    providers["rooms"].add_recording("interview-x", "rec", start_ts=1)

    class EmployerFinishesFirst(FakeTranscriber):
        def transcribe(self, audio_url):
            if not self.urls:
                self.urls.append(audio_url)
                inner_result.append(pipeline.run(completed["interview"], employer))
            return super().transcribe(audio_url)

    inner_result = []
    pipeline = FeedbackPipeline(providers["rooms"], EmployerFinishesFirst(), providers["analyzer"])

    outer_result = pipeline.run(completed["interview"], student)

    assert inner_result[0]["message"] == "Feedback generated"
    assert outer_result == {"message": "Feedback already generated", "feedback": None}
    rows = db_query("SELECT recipient_role FROM interview_feedback ORDER BY recipient_role")
    assert rows == [{"recipient_role": "EMPLOYER"}, {"recipient_role": "STUDENT"}]
