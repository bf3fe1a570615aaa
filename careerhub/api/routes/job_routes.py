"""
Job Routes

GET /jobs - List active jobs (type filter + text search)
POST /jobs - Create job posting (employer only)
GET /jobs/{job_id} - Get job details
PUT /jobs/{job_id} - Update or deactivate job (owning employer only)
DELETE /jobs/{job_id} - Delete job (owning employer only)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text
from typing import List, Optional

from careerhub.db.postgres import get_db_session, execute_raw_sql, fetch_one
from careerhub.core.auth import get_optional_user, require_employer
from careerhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from careerhub.schemas.schemas import (
    CompanySummary, JobCreate, JobUpdate, JobResponse, JobDetailResponse, JobType, MessageResponse
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

# Columns a partial update may clear
NULLABLE_JOB_FIELDS = {"location", "salary", "deadline"}

JOB_SELECT = """
    SELECT j.job_id, j.company_id, c.name AS company_name, c.logo AS company_logo,
           c.website AS company_website, c.description AS company_description,
           j.title, j.description, j.location, j.job_type, j.salary, j.deadline, j.is_active,
           j.requires_resume, j.requires_cover_letter, j.requires_transcript, j.created_at,
           (SELECT COUNT(*) FROM applications a WHERE a.job_id = j.job_id) AS application_count
    FROM jobs j
    JOIN companies c ON j.company_id = c.company_id
"""


def job_from_row(row: dict, model=JobResponse, **extra):
    """Build a job response from a JOB_SELECT row."""
    return model(
        company=CompanySummary(
            company_id=row["company_id"], name=row["company_name"], logo=row["company_logo"]
        ),
        **{k: v for k, v in row.items() if k in model.model_fields and k != "company"},
        **extra
    )


def escape_like(value: str) -> str:
    """Make LIKE match the text literally; pairs with ESCAPE '\\'."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _get_owned_job(db, job_id: int, employer: dict) -> dict:
    job = fetch_one(db, "SELECT job_id, company_id FROM jobs WHERE job_id = :id", {"id": job_id})
    if not job:
        raise NotFoundError("Job not found")
    if employer["company_id"] is None or job["company_id"] != employer["company_id"]:
        raise AuthorizationError()
    return job


@router.get("", response_model=List[JobResponse])
async def list_jobs(
    type: Optional[JobType] = Query(None, description="Exact job type"),
    search: Optional[str] = Query(None, description="Search in title, description and company name")
):
    """List active job postings, newest first. No pagination."""
    sql = JOB_SELECT + " WHERE j.is_active = TRUE"
    params = {}

    if type:
        sql += " AND j.job_type = :job_type"
        params["job_type"] = type.value
    if search:
        sql += """
            AND (LOWER(j.title) LIKE LOWER(:search) ESCAPE '\\'
                 OR LOWER(j.description) LIKE LOWER(:search) ESCAPE '\\'
                 OR LOWER(c.name) LIKE LOWER(:search) ESCAPE '\\')
        """
        params["search"] = f"%{escape_like(search)}%"

    sql += " ORDER BY j.created_at DESC, j.job_id DESC"

    return [job_from_row(row) for row in execute_raw_sql(sql, params)]


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, employer: dict = Depends(require_employer)):
    """Create a new job posting for the employer's company."""
    if employer["company_id"] is None:
        raise ValidationError("No company associated")

    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO jobs (company_id, title, description, location, job_type, salary, deadline,
                    is_active, requires_resume, requires_cover_letter, requires_transcript)
                VALUES (:company_id, :title, :description, :location, :job_type, :salary, :deadline,
                    TRUE, :requires_resume, :requires_cover_letter, :requires_transcript)
                RETURNING job_id
            """),
            {
                "company_id": employer["company_id"], "title": job.title, "description": job.description,
                "location": job.location, "job_type": job.job_type.value, "salary": job.salary,
                "deadline": job.deadline, "requires_resume": job.requires_resume,
                "requires_cover_letter": job.requires_cover_letter,
                "requires_transcript": job.requires_transcript
            }
        )
        job_id = result.scalar_one()
        row = fetch_one(db, JOB_SELECT + " WHERE j.job_id = :id", {"id": job_id})

    return job_from_row(row)


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(job_id: int, user: Optional[dict] = Depends(get_optional_user)):
    """Get job details. Signed-in callers also learn whether they already applied."""
    with get_db_session() as db:
        row = fetch_one(db, JOB_SELECT + " WHERE j.job_id = :id", {"id": job_id})
        if not row:
            raise NotFoundError("Job not found")

        has_applied = False
        if user:
            has_applied = fetch_one(
                db,
                "SELECT application_id FROM applications WHERE job_id = :jid AND user_id = :uid",
                {"jid": job_id, "uid": user["user_id"]}
            ) is not None

    return job_from_row(row, JobDetailResponse, has_applied=has_applied)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: int, data: JobUpdate, employer: dict = Depends(require_employer)):
    """Update a job posting. Send is_active=false to deactivate it."""
    updates = {
        field: value for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field in NULLABLE_JOB_FIELDS
    }
    if "job_type" in updates:
        updates["job_type"] = updates["job_type"].value

    with get_db_session() as db:
        _get_owned_job(db, job_id, employer)

        if updates:
            set_clause = ", ".join(f"{field} = :{field}" for field in updates)
            db.execute(
                text(f"UPDATE jobs SET {set_clause}, updated_at = CURRENT_TIMESTAMP WHERE job_id = :job_id"),
                {**updates, "job_id": job_id}
            )

        row = fetch_one(db, JOB_SELECT + " WHERE j.job_id = :id", {"id": job_id})

    return job_from_row(row)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: int, employer: dict = Depends(require_employer)):
    """Delete a job posting and everything hanging off it."""
    with get_db_session() as db:
        _get_owned_job(db, job_id, employer)
        db.execute(text("DELETE FROM jobs WHERE job_id = :id"), {"id": job_id})

    return MessageResponse(message="Job deleted")
