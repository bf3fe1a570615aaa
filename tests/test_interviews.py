import pytest

SLOTS = ["2026-11-02T10:00:00", "2026-11-03T14:00:00", "2026-11-04T09:30:00"]


@pytest.fixture
def setup(factory):
    company = factory.company()
    employer = factory.employer(company, "Erin Employer")
    student = factory.student("Sam Student")
    app_id = factory.application(factory.job(company), student)
    return {"company": company, "employer": employer, "student": student, "application": app_id}


def _pending_interview(factory, application_id):
    interview_id = factory.interview(application_id)
    slot_ids = [factory.slot(interview_id, start) for start in SLOTS]
    return interview_id, slot_ids


def test_schedule_interview(client, auth, setup, db_query):
    response = client.post(
        "/api/interviews",
        json={"application_id": setup["application"], "duration": 45,
              "time_slots": [{"start_time": s} for s in SLOTS[:2]]},
        headers=auth(setup["employer"]),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "PENDING_RESPONSE"
    assert body["duration"] == 45
    assert [s["start_time"] for s in body["time_slots"]] == SLOTS[:2]
    assert body["candidate"]["name"] == "Sam Student"
    assert db_query("SELECT status FROM applications")[0]["status"] == "INTERVIEW"


@pytest.mark.parametrize("slots", [[], SLOTS[:1]])
def test_fewer_than_two_slots_writes_nothing(client, auth, setup, db_query, slots):
    response = client.post(
        "/api/interviews",
        json={"application_id": setup["application"], "time_slots": [{"start_time": s} for s in slots]},
        headers=auth(setup["employer"]),
    )

    assert response.status_code == 400
    assert db_query("SELECT * FROM interviews") == []
    assert db_query("SELECT * FROM interview_time_slots") == []
    assert db_query("SELECT status FROM applications")[0]["status"] == "PENDING"


def test_schedule_for_rejected_application_writes_nothing(client, auth, factory, setup, db_query):
    app_id = factory.application(factory.job(setup["company"]), factory.student(), status="REJECTED")

    response = client.post(
        "/api/interviews",
        json={"application_id": app_id, "time_slots": [{"start_time": s} for s in SLOTS]},
        headers=auth(setup["employer"]),
    )

    assert response.status_code == 400
    assert db_query("SELECT * FROM interviews") == []


def test_other_company_cannot_schedule(client, auth, factory, setup):
    outsider = factory.employer(factory.company("Other"))
    response = client.post(
        "/api/interviews",
        json={"application_id": setup["application"], "time_slots": [{"start_time": s} for s in SLOTS]},
        headers=auth(outsider),
    )
    assert response.status_code == 401


def test_select_slot_schedules_atomically(client, auth, factory, setup, db_query):
    interview_id, (s1, s2, s3) = _pending_interview(factory, setup["application"])

    response = client.put(
        f"/api/interviews/{interview_id}/select-slot", json={"slot_id": s2}, headers=auth(setup["student"])
    )

    assert response.status_code == 200
    detail = client.get(f"/api/interviews/{interview_id}", headers=auth(setup["student"])).json()
    assert detail["status"] == "SCHEDULED"
    assert detail["scheduled_at"] == SLOTS[1]
    assert {s["slot_id"]: s["selected"] for s in detail["time_slots"]} == {s1: False, s2: True, s3: False}
    assert len(db_query("SELECT * FROM interview_time_slots WHERE selected = TRUE")) == 1


def test_select_slot_when_already_scheduled_changes_nothing(client, auth, factory, setup, db_query):
    interview_id, (s1, s2, _) = _pending_interview(factory, setup["application"])
    client.put(f"/api/interviews/{interview_id}/select-slot", json={"slot_id": s1}, headers=auth(setup["student"]))

    again = client.put(
        f"/api/interviews/{interview_id}/select-slot", json={"slot_id": s2}, headers=auth(setup["student"])
    )

    assert again.status_code == 400
    assert again.json()["error"]["message"] == "Time already selected"
    selected = db_query("SELECT slot_id FROM interview_time_slots WHERE selected = TRUE")
    assert [r["slot_id"] for r in selected] == [s1]


def test_select_foreign_slot(client, auth, factory, setup, db_query):
    interview_id, _ = _pending_interview(factory, setup["application"])
    other_interview, other_slots = _pending_interview(
        factory, factory.application(factory.job(setup["company"]), setup["student"])
    )

    response = client.put(
        f"/api/interviews/{interview_id}/select-slot", json={"slot_id": other_slots[0]},
        headers=auth(setup["student"]),
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid slot"
    assert db_query("SELECT status FROM interviews WHERE interview_id = :i", {"i": interview_id})[0]["status"] \
        == "PENDING_RESPONSE"


def test_only_candidate_selects_slot(client, auth, factory, setup):
    interview_id, (s1, _, _) = _pending_interview(factory, setup["application"])

    by_employer = client.put(
        f"/api/interviews/{interview_id}/select-slot", json={"slot_id": s1}, headers=auth(setup["employer"])
    )
    by_other_student = client.put(
        f"/api/interviews/{interview_id}/select-slot", json={"slot_id": s1}, headers=auth(factory.student())
    )

    assert by_employer.status_code == 401
    assert by_other_student.status_code == 401


def test_non_participants_cannot_read(client, auth, factory, setup):
    interview_id, _ = _pending_interview(factory, setup["application"])

    assert client.get(f"/api/interviews/{interview_id}", headers=auth(setup["employer"])).status_code == 200
    assert client.get(f"/api/interviews/{interview_id}", headers=auth(factory.student())).status_code == 401
    outsider = factory.employer(factory.company("Other"))
    assert client.get(f"/api/interviews/{interview_id}", headers=auth(outsider)).status_code == 401
    assert client.get("/api/interviews/9999", headers=auth(setup["student"])).status_code == 404


def test_list_interviews_by_role(client, auth, factory, setup):
    first, _ = _pending_interview(factory, setup["application"])
    second = factory.interview(setup["application"], "CANCELLED")
    factory.interview(factory.application(factory.job(factory.company("Other")), factory.student()))

    student_view = client.get("/api/interviews", headers=auth(setup["student"])).json()
    employer_view = client.get("/api/interviews", headers=auth(setup["employer"])).json()

    assert [i["interview_id"] for i in student_view] == [second, first]
    assert [i["interview_id"] for i in employer_view] == [second, first]


def test_status_update(client, auth, factory, setup):
    interview_id = factory.interview(setup["application"], "SCHEDULED")

    invalid = client.put(
        f"/api/interviews/{interview_id}", json={"status": "IN_PROGRESS"}, headers=auth(setup["student"])
    )
    assert invalid.status_code == 400

    done = client.put(f"/api/interviews/{interview_id}", json={"status": "COMPLETED"}, headers=auth(setup["student"]))
    assert done.status_code == 200
    # The other participant leaving too
    again = client.put(
        f"/api/interviews/{interview_id}", json={"status": "COMPLETED"}, headers=auth(setup["employer"])
    )
    assert again.status_code == 200

    cancel = client.put(
        f"/api/interviews/{interview_id}", json={"status": "CANCELLED"}, headers=auth(setup["employer"])
    )
    assert cancel.status_code == 400


def test_room_is_created_once_and_reused(client, auth, factory, setup, providers, db_query):
    interview_id = factory.interview(setup["application"], "SCHEDULED")

    first = client.post(f"/api/interviews/{interview_id}/room", headers=auth(setup["employer"]))
    second = client.post(f"/api/interviews/{interview_id}/room", headers=auth(setup["student"]))

    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json()["room_name"] == f"interview-{interview_id}"
    assert providers["rooms"].create_calls == 1
    row = db_query("SELECT status, room_url FROM interviews")[0]
    assert row["status"] == "IN_PROGRESS"
    assert row["room_url"] == first.json()["room_url"]


def test_room_reuses_provider_room_when_not_stored(client, auth, factory, setup, providers):
    interview_id = factory.interview(setup["application"], "SCHEDULED")
    providers["rooms"].create_room(f"interview-{interview_id}")

    response = client.post(f"/api/interviews/{interview_id}/room", headers=auth(setup["student"]))

    assert response.status_code == 200
    assert providers["rooms"].create_calls == 1


def test_room_not_ready(client, auth, factory, setup, providers):
    interview_id = factory.interview(setup["application"], "PENDING_RESPONSE")

    response = client.post(f"/api/interviews/{interview_id}/room", headers=auth(setup["student"]))

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Interview not ready to join"
    assert providers["rooms"].create_calls == 0


def test_room_provider_failure(client, auth, factory, setup, providers, db_query):
    interview_id = factory.interview(setup["application"], "SCHEDULED")
    providers["rooms"].fail_with = "quota exceeded"

    response = client.post(f"/api/interviews/{interview_id}/room", headers=auth(setup["student"]))

    assert response.status_code == 502
    assert response.json()["error"]["message"] == "Failed to create video room: quota exceeded"
    assert db_query("SELECT status FROM interviews")[0]["status"] == "SCHEDULED"
