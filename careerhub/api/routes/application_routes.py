"""
Application Routes

GET /applications - List own applications with latest interview
POST /applications - Apply to a job (student only)
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from typing import List

from careerhub.db.postgres import get_db_session, fetch_all, fetch_one
from careerhub.core.auth import get_current_user, require_student
from careerhub.core.exceptions import NotFoundError, ValidationError
from careerhub.schemas.schemas import (
    ApplicationCreate, ApplicationResponse, CompanySummary, InterviewSummary
)
from careerhub.services.interview_service import latest_interviews_for_student

router = APIRouter(prefix="/applications", tags=["Applications"])

ALREADY_APPLIED = "Already applied to this job"

APPLICATION_SELECT = """
    SELECT a.application_id, a.job_id, j.title AS job_title, a.status, a.cover_note,
           a.resume_url, a.cover_letter_url, a.transcript_url, a.created_at,
           c.company_id, c.name AS company_name, c.logo AS company_logo
    FROM applications a
    JOIN jobs j ON a.job_id = j.job_id
    JOIN companies c ON j.company_id = c.company_id
"""

# job flag -> (application field, label used in the error message)
REQUIRED_DOCUMENTS = {
    "requires_resume": ("resume_url", "resume"),
    "requires_cover_letter": ("cover_letter_url", "cover letter"),
    "requires_transcript": ("transcript_url", "transcript"),
}


def _to_response(row: dict, latest: dict = None) -> ApplicationResponse:
    return ApplicationResponse(
        application_id=row["application_id"], job_id=row["job_id"], job_title=row["job_title"],
        company=CompanySummary(company_id=row["company_id"], name=row["company_name"], logo=row["company_logo"]),
        status=row["status"], cover_note=row["cover_note"], resume_url=row["resume_url"],
        cover_letter_url=row["cover_letter_url"], transcript_url=row["transcript_url"],
        latest_interview=InterviewSummary(**latest) if latest else None,
        created_at=row["created_at"]
    )


def missing_documents(job: dict, data: ApplicationCreate) -> List[str]:
    """Labels of the documents the job requires but the application lacks."""
    missing = []
    for flag, (field, label) in REQUIRED_DOCUMENTS.items():
        value = getattr(data, field)
        if job[flag] and not (value and value.strip()):
            missing.append(label)
    return missing


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(user: dict = Depends(get_current_user)):
    """Caller's applications, newest first."""
    with get_db_session() as db:
        rows = fetch_all(
            db,
            APPLICATION_SELECT + " WHERE a.user_id = :uid ORDER BY a.created_at DESC, a.application_id DESC",
            {"uid": user["user_id"]}
        )
        latest = latest_interviews_for_student(db, user["user_id"])

    return [_to_response(row, latest.get(row["application_id"])) for row in rows]


@router.post("", response_model=ApplicationResponse, status_code=201)
async def apply_to_job(data: ApplicationCreate, student: dict = Depends(require_student)):
    """Apply to an active job. One application per student per job."""
    try:
        with get_db_session() as db:
            job = fetch_one(
                db,
                """
                SELECT job_id, is_active, requires_resume, requires_cover_letter, requires_transcript
                FROM jobs WHERE job_id = :id
                """,
                {"id": data.job_id}
            )
            if not job:
                raise NotFoundError("Job not found")
            if not job["is_active"]:
                raise ValidationError("This job is no longer accepting applications")

            existing = fetch_one(
                db,
                "SELECT application_id FROM applications WHERE job_id = :jid AND user_id = :uid",
                {"jid": data.job_id, "uid": student["user_id"]}
            )
            if existing:
                raise ValidationError(ALREADY_APPLIED)

            missing = missing_documents(job, data)
            if missing:
                raise ValidationError(f"Missing required documents: {', '.join(missing)}")

            result = db.execute(
                text("""
                    INSERT INTO applications (job_id, user_id, status, cover_note,
                        resume_url, cover_letter_url, transcript_url)
                    VALUES (:jid, :uid, 'PENDING', :cover_note, :resume_url, :cover_letter_url, :transcript_url)
                    RETURNING application_id
                """),
                {
                    "jid": data.job_id, "uid": student["user_id"], "cover_note": data.cover_note,
                    "resume_url": data.resume_url, "cover_letter_url": data.cover_letter_url,
                    "transcript_url": data.transcript_url
                }
            )
            application_id = result.scalar_one()
            row = fetch_one(db, APPLICATION_SELECT + " WHERE a.application_id = :id", {"id": application_id})
    except IntegrityError:
        # The unique (job_id, user_id) constraint caught a concurrent duplicate
        raise ValidationError(ALREADY_APPLIED)

    return _to_response(row)
