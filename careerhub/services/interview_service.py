"""
Interview Service - scheduling, slot selection, room access and status moves.

Every function takes an open session from get_db_session(); the caller's
`with` block is the transaction. Status values come only from
careerhub.services.workflow.

Only the candidate (application owner) or an employee of the company that
posted the job may read or change an interview.
"""

import logging
from typing import Optional

from sqlalchemy import text

from careerhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError, UpstreamServiceError
from careerhub.db.postgres import fetch_all, fetch_one
from careerhub.models.providers import VideoRoom
from careerhub.schemas.schemas import ApplicationStatus, InterviewCreate
from careerhub.services.providers import RoomProvider
from careerhub.services.workflow import (
    InterviewEvent, next_application_status, next_interview_status,
)

logger = logging.getLogger(__name__)

MIN_TIME_SLOTS = 2

INTERVIEW_CONTEXT_SQL = """
    SELECT i.interview_id, i.application_id, i.duration, i.status, i.scheduled_at,
           i.room_name, i.room_url, i.transcription, i.created_at,
           a.user_id AS candidate_id, a.job_id, j.title AS job_title, j.company_id,
           c.name AS company_name, c.logo AS company_logo,
           u.name AS candidate_name, u.email AS candidate_email
    FROM interviews i
    JOIN applications a ON i.application_id = a.application_id
    JOIN jobs j ON a.job_id = j.job_id
    JOIN companies c ON j.company_id = c.company_id
    JOIN users u ON a.user_id = u.user_id
"""


def room_name_for(interview_id: int) -> str:
    return f"interview-{interview_id}"


def is_participant(interview: dict, user: dict) -> bool:
    if user["role"] == "STUDENT":
        return interview["candidate_id"] == user["user_id"]
    if user["role"] == "EMPLOYER":
        return user["company_id"] is not None and interview["company_id"] == user["company_id"]
    return False


def load_interview(db, interview_id: int, user: dict) -> dict:
    """Fetch an interview with its application/job context, checking access."""
    interview = fetch_one(db, INTERVIEW_CONTEXT_SQL + " WHERE i.interview_id = :id", {"id": interview_id})
    if interview is None:
        raise NotFoundError("Interview not found")
    if not is_participant(interview, user):
        raise AuthorizationError()
    return interview


def list_interviews(db, user: dict) -> list:
    """Caller's interviews, newest first."""
    if user["role"] == "STUDENT":
        where, params = "a.user_id = :uid", {"uid": user["user_id"]}
    elif user["role"] == "EMPLOYER" and user["company_id"] is not None:
        where, params = "j.company_id = :cid", {"cid": user["company_id"]}
    else:
        return []
    return fetch_all(
        db,
        INTERVIEW_CONTEXT_SQL + f" WHERE {where} ORDER BY i.created_at DESC, i.interview_id DESC",
        params
    )


def get_time_slots(db, interview_id: int) -> list:
    return fetch_all(
        db,
        """
        SELECT slot_id, start_time, selected FROM interview_time_slots
        WHERE interview_id = :id ORDER BY start_time, slot_id
        """,
        {"id": interview_id}
    )


def get_feedback_for(db, interview_id: int, recipient_id: int) -> list:
    return fetch_all(
        db,
        """
        SELECT feedback_id, interview_id, recipient_id, recipient_role, clarity_score,
               pacing_score, engagement_score, suggestions, created_at
        FROM interview_feedback
        WHERE interview_id = :id AND recipient_id = :uid
        ORDER BY feedback_id
        """,
        {"id": interview_id, "uid": recipient_id}
    )


def schedule_interview(db, employer: dict, payload: InterviewCreate) -> int:
    """
    Create an interview with its proposed slots and move the application to
    INTERVIEW. Nothing is written unless all of it is.
    """
    if len(payload.time_slots) < MIN_TIME_SLOTS:
        raise ValidationError(f"At least {MIN_TIME_SLOTS} time slots are required")

    application = fetch_one(
        db,
        """
        SELECT a.application_id, a.status, j.company_id
        FROM applications a JOIN jobs j ON a.job_id = j.job_id
        WHERE a.application_id = :id
        """,
        {"id": payload.application_id}
    )
    if application is None:
        raise NotFoundError("Application not found")
    if employer["company_id"] is None or application["company_id"] != employer["company_id"]:
        raise AuthorizationError()

    new_status = next_application_status(application["status"], ApplicationStatus.interview)

    interview_id = db.execute(
        text("""
            INSERT INTO interviews (application_id, duration, status)
            VALUES (:app_id, :duration, 'PENDING_RESPONSE')
            RETURNING interview_id
        """),
        {"app_id": payload.application_id, "duration": payload.duration}
    ).scalar_one()

    for slot in payload.time_slots:
        db.execute(
            text("INSERT INTO interview_time_slots (interview_id, start_time, selected) VALUES (:iid, :start, FALSE)"),
            {"iid": interview_id, "start": slot.start_time}
        )

    db.execute(
        text("""
            UPDATE applications SET status = :status, updated_at = CURRENT_TIMESTAMP
            WHERE application_id = :id
        """),
        {"status": new_status.value, "id": payload.application_id}
    )

    logger.info("Interview %s scheduled for application %s", interview_id, payload.application_id)
    return interview_id


def select_slot(db, interview: dict, slot_id: int) -> None:
    """
    Candidate picks one proposed slot. The status guard is part of the
    UPDATE itself, so two concurrent selections cannot both succeed.
    """
    slot = fetch_one(
        db,
        "SELECT slot_id FROM interview_time_slots WHERE slot_id = :sid AND interview_id = :iid",
        {"sid": slot_id, "iid": interview["interview_id"]}
    )
    if slot is None:
        raise ValidationError("Invalid slot")

    new_status = next_interview_status(interview["status"], InterviewEvent.select_slot)

    result = db.execute(
        text("""
            UPDATE interviews
            SET status = :status,
                scheduled_at = (SELECT start_time FROM interview_time_slots WHERE slot_id = :sid),
                updated_at = CURRENT_TIMESTAMP
            WHERE interview_id = :iid AND status = 'PENDING_RESPONSE'
        """),
        {"status": new_status.value, "sid": slot_id, "iid": interview["interview_id"]}
    )
    if result.rowcount != 1:
        raise ValidationError("Time already selected")

    db.execute(
        text("""
            UPDATE interview_time_slots
            SET selected = CASE WHEN slot_id = :sid THEN TRUE ELSE FALSE END
            WHERE interview_id = :iid
        """),
        {"sid": slot_id, "iid": interview["interview_id"]}
    )


def apply_event(db, interview: dict, event: InterviewEvent) -> str:
    """Move the interview along the transition table; returns the new status."""
    new_status = next_interview_status(interview["status"], event)
    if new_status.value == interview["status"]:
        return new_status.value

    result = db.execute(
        text("""
            UPDATE interviews SET status = :new, updated_at = CURRENT_TIMESTAMP
            WHERE interview_id = :id AND status = :current
        """),
        {"new": new_status.value, "id": interview["interview_id"], "current": interview["status"]}
    )
    if result.rowcount != 1:
        raise ValidationError("Interview was updated by someone else, reload and retry")
    return new_status.value


def obtain_room(provider: RoomProvider, interview_id: int) -> VideoRoom:
    """Look up the interview's room at the provider, creating it when missing."""
    name = room_name_for(interview_id)
    try:
        room: Optional[VideoRoom] = provider.get_room(name)
        if room is None:
            room = provider.create_room(name)
            logger.info("Created video room %s", name)
    except UpstreamServiceError as e:
        raise UpstreamServiceError(f"Failed to create video room: {e.message}", provider=e.provider) from e
    return room


def save_room(db, interview: dict, room: VideoRoom) -> None:
    db.execute(
        text("""
            UPDATE interviews SET room_name = :name, room_url = :url, updated_at = CURRENT_TIMESTAMP
            WHERE interview_id = :id
        """),
        {"name": room.name, "url": room.url, "id": interview["interview_id"]}
    )


def latest_interviews_for_student(db, user_id: int) -> dict:
    """application_id -> most recent interview row, for one student's applications."""
    rows = fetch_all(
        db,
        """
        SELECT i.interview_id, i.application_id, i.status, i.scheduled_at
        FROM interviews i
        JOIN applications a ON i.application_id = a.application_id
        WHERE a.user_id = :uid
        ORDER BY i.created_at DESC, i.interview_id DESC
        """,
        {"uid": user_id}
    )
    latest = {}
    for row in rows:
        latest.setdefault(row["application_id"], row)
    return latest
