"""
Employer Routes

GET /employer/company - Own company (or null)
POST /employer/company - Create company and link the caller to it
PUT /employer/company - Update own company
GET /employer/jobs - Own company's jobs, active or not
GET /employer/applicants - Applications to own company's jobs
PUT /employer/applicants - Change an application's status
GET /employer/reviews - Student reviews, aggregates and improvement tips
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text
from typing import List, Optional

from careerhub.db.postgres import get_db_session, fetch_all, fetch_one
from careerhub.core.auth import require_employer
from careerhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from careerhub.schemas.schemas import (
    ApplicantInfo, ApplicantResponse, ApplicationStatusUpdate, CompanyCreate, CompanyResponse,
    CompanySummary, CompanyUpdate, EmployerReviewsResponse, JobResponse, MessageResponse
)
from careerhub.services.workflow import next_application_status
from careerhub.services.reputation import improvement_tips
from careerhub.services.review_service import fetch_company_reviews, reputation, to_company_review
from careerhub.api.routes.job_routes import JOB_SELECT, job_from_row

router = APIRouter(prefix="/employer", tags=["Employer"])

COMPANY_SELECT = """
    SELECT company_id, name, logo, website, description, created_at
    FROM companies WHERE company_id = :id
"""


# ============================================================
# COMPANY
# ============================================================

@router.get("/company", response_model=Optional[CompanyResponse])
async def get_company(employer: dict = Depends(require_employer)):
    """The caller's company, or null when they have not created one yet."""
    if employer["company_id"] is None:
        return None
    with get_db_session() as db:
        row = fetch_one(db, COMPANY_SELECT, {"id": employer["company_id"]})
    return CompanyResponse(**row) if row else None


@router.post("/company", response_model=CompanyResponse, status_code=201)
async def create_company(data: CompanyCreate, employer: dict = Depends(require_employer)):
    """Create a company and make the caller its employee."""
    if employer["company_id"] is not None:
        raise ValidationError("Company already exists")

    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO companies (name, website, description, logo)
                VALUES (:name, :website, :description, :logo)
                RETURNING company_id
            """),
            {"name": data.name, "website": data.website, "description": data.description, "logo": data.logo}
        )
        company_id = result.scalar_one()
        db.execute(
            text("UPDATE users SET company_id = :cid WHERE user_id = :uid"),
            {"cid": company_id, "uid": employer["user_id"]}
        )
        row = fetch_one(db, COMPANY_SELECT, {"id": company_id})

    return CompanyResponse(**row)


@router.put("/company", response_model=CompanyResponse)
async def update_company(data: CompanyUpdate, employer: dict = Depends(require_employer)):
    if employer["company_id"] is None:
        raise NotFoundError("No company found")

    updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None or k != "name"}

    with get_db_session() as db:
        if updates:
            set_clause = ", ".join(f"{field} = :{field}" for field in updates)
            db.execute(
                text(f"UPDATE companies SET {set_clause}, updated_at = CURRENT_TIMESTAMP WHERE company_id = :cid"),
                {**updates, "cid": employer["company_id"]}
            )
        row = fetch_one(db, COMPANY_SELECT, {"id": employer["company_id"]})

    if not row:
        raise NotFoundError("No company found")
    return CompanyResponse(**row)


# ============================================================
# JOBS & APPLICANTS
# ============================================================

@router.get("/jobs", response_model=List[JobResponse])
async def get_company_jobs(employer: dict = Depends(require_employer)):
    """All jobs posted by the caller's company, with application counts."""
    if employer["company_id"] is None:
        return []
    with get_db_session() as db:
        rows = fetch_all(
            db,
            JOB_SELECT + " WHERE j.company_id = :cid ORDER BY j.created_at DESC, j.job_id DESC",
            {"cid": employer["company_id"]}
        )
    return [job_from_row(row) for row in rows]


@router.get("/applicants", response_model=List[ApplicantResponse])
async def get_applicants(
    job: Optional[int] = Query(None, description="Only applications to this job"),
    employer: dict = Depends(require_employer)
):
    """Applications to the caller's company's jobs, newest first."""
    if employer["company_id"] is None:
        return []

    sql = """
        SELECT a.application_id, a.job_id, j.title AS job_title, a.status, a.cover_note,
               a.resume_url, a.cover_letter_url, a.transcript_url, a.created_at,
               u.user_id, u.name, u.email, sp.university, sp.major, sp.grad_year, sp.gpa,
               sp.linkedin, sp.github
        FROM applications a
        JOIN jobs j ON a.job_id = j.job_id
        JOIN users u ON a.user_id = u.user_id
        LEFT JOIN student_profiles sp ON sp.user_id = u.user_id
        WHERE j.company_id = :cid
    """
    params = {"cid": employer["company_id"]}
    if job is not None:
        sql += " AND j.job_id = :jid"
        params["jid"] = job
    sql += " ORDER BY a.created_at DESC, a.application_id DESC"

    with get_db_session() as db:
        rows = fetch_all(db, sql, params)

    return [
        ApplicantResponse(
            **{k: row[k] for k in ApplicantResponse.model_fields if k != "applicant"},
            applicant=ApplicantInfo(**{k: row[k] for k in ApplicantInfo.model_fields}),
        )
        for row in rows
    ]


@router.put("/applicants", response_model=MessageResponse)
async def update_application_status(data: ApplicationStatusUpdate, employer: dict = Depends(require_employer)):
    """Move an application along its status workflow."""
    with get_db_session() as db:
        application = fetch_one(
            db,
            """
            SELECT a.application_id, a.status, j.company_id
            FROM applications a JOIN jobs j ON a.job_id = j.job_id
            WHERE a.application_id = :id
            """,
            {"id": data.application_id}
        )
        if not application:
            raise NotFoundError("Application not found")
        if application["company_id"] != employer["company_id"]:
            raise AuthorizationError()

        new_status = next_application_status(application["status"], data.status)
        if new_status.value != application["status"]:
            db.execute(
                text("""
                    UPDATE applications SET status = :status, updated_at = CURRENT_TIMESTAMP
                    WHERE application_id = :id
                """),
                {"status": new_status.value, "id": data.application_id}
            )

    return MessageResponse(message=f"Application status updated to {new_status.value}")


# ============================================================
# REVIEWS
# ============================================================

@router.get("/reviews", response_model=EmployerReviewsResponse)
async def get_company_reviews(employer: dict = Depends(require_employer)):
    """Reviews students left for the caller's company, with coaching tips."""
    if employer["company_id"] is None:
        raise ValidationError("No company associated")

    with get_db_session() as db:
        company = fetch_one(db, COMPANY_SELECT, {"id": employer["company_id"]})
        reviews = fetch_company_reviews(db, employer["company_id"])

    summary, ghosting_rate, high_ghosting = reputation(reviews)

    return EmployerReviewsResponse(
        company=CompanySummary(company_id=company["company_id"], name=company["name"], logo=company["logo"]),
        review_count=len(reviews),
        aggregate_ratings=summary,
        ghosting_rate=ghosting_rate,
        high_ghosting=high_ghosting,
        tips=improvement_tips(summary, ghosting_rate),
        reviews=[to_company_review(r) for r in reviews],
    )
