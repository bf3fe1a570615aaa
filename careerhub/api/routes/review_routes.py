"""
Review Routes

GET /reviews - Student's reviewable applications (pending and submitted)
POST /reviews - Review a company after a completed interview
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from careerhub.db.postgres import get_db_session, fetch_all, fetch_one
from careerhub.core.auth import require_student
from careerhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from careerhub.schemas.schemas import (
    CompanySummary, InterviewStatus, InterviewSummary, ReviewableApplication, ReviewCreate,
    ReviewResponse, StudentReviewsResponse
)
from careerhub.services.interview_service import latest_interviews_for_student
from careerhub.services.reputation import RATING_DIMENSIONS, validate_ratings

router = APIRouter(prefix="/reviews", tags=["Reviews"])

ALREADY_REVIEWED = "Already reviewed this application"

REVIEW_COLUMNS = """
    review_id, application_id, company_id, responsiveness, transparency, professionalism,
    interview_experience, overall, was_ghosted, comment, created_at
"""


@router.get("", response_model=StudentReviewsResponse)
async def get_reviews(student: dict = Depends(require_student)):
    """
    Applications with at least one completed interview, split by whether
    the student has reviewed the company yet.
    """
    with get_db_session() as db:
        applications = fetch_all(
            db,
            """
            SELECT a.application_id, a.job_id, j.title AS job_title,
                   c.company_id, c.name AS company_name, c.logo AS company_logo
            FROM applications a
            JOIN jobs j ON a.job_id = j.job_id
            JOIN companies c ON j.company_id = c.company_id
            WHERE a.user_id = :uid
              AND EXISTS (
                  SELECT 1 FROM interviews i
                  WHERE i.application_id = a.application_id AND i.status = 'COMPLETED'
              )
            ORDER BY a.created_at DESC, a.application_id DESC
            """,
            {"uid": student["user_id"]}
        )
        reviews = {
            r["application_id"]: r
            for r in fetch_all(
                db,
                f"SELECT {REVIEW_COLUMNS} FROM reviews WHERE reviewer_id = :uid",
                {"uid": student["user_id"]}
            )
        }
        latest = latest_interviews_for_student(db, student["user_id"])

    pending, submitted = [], []
    for app in applications:
        review = reviews.get(app["application_id"])
        interview = latest.get(app["application_id"])
        item = ReviewableApplication(
            application_id=app["application_id"],
            job_id=app["job_id"],
            job_title=app["job_title"],
            company=CompanySummary(company_id=app["company_id"], name=app["company_name"], logo=app["company_logo"]),
            latest_interview=InterviewSummary(**interview) if interview else None,
            review=ReviewResponse(**review) if review else None,
        )
        (submitted if review else pending).append(item)

    return StudentReviewsResponse(pending=pending, submitted=submitted)


@router.post("", response_model=ReviewResponse, status_code=201)
async def create_review(data: ReviewCreate, student: dict = Depends(require_student)):
    """One review per application, once its latest interview is COMPLETED."""
    validate_ratings(getattr(data, dim) for dim in RATING_DIMENSIONS)

    try:
        with get_db_session() as db:
            application = fetch_one(
                db,
                """
                SELECT a.application_id, a.user_id, j.company_id
                FROM applications a JOIN jobs j ON a.job_id = j.job_id
                WHERE a.application_id = :id
                """,
                {"id": data.application_id}
            )
            if not application:
                raise NotFoundError("Application not found")
            if application["user_id"] != student["user_id"]:
                raise AuthorizationError()

            if fetch_one(db, "SELECT review_id FROM reviews WHERE application_id = :id", {"id": data.application_id}):
                raise ValidationError(ALREADY_REVIEWED)

            interview = fetch_one(
                db,
                """
                SELECT status FROM interviews WHERE application_id = :id
                ORDER BY created_at DESC, interview_id DESC LIMIT 1
                """,
                {"id": data.application_id}
            )
            if not interview:
                raise ValidationError("No interview found for this application")
            if interview["status"] != InterviewStatus.completed.value:
                raise ValidationError("Can only review after completing an interview")

            result = db.execute(
                text(f"""
                    INSERT INTO reviews (application_id, reviewer_id, company_id, responsiveness,
                        transparency, professionalism, interview_experience, overall, was_ghosted, comment)
                    VALUES (:application_id, :reviewer_id, :company_id, :responsiveness,
                        :transparency, :professionalism, :interview_experience, :overall, :was_ghosted, :comment)
                    RETURNING {REVIEW_COLUMNS}
                """),
                {
                    "application_id": data.application_id, "reviewer_id": student["user_id"],
                    "company_id": application["company_id"],
                    **{dim: getattr(data, dim) for dim in RATING_DIMENSIONS},
                    "was_ghosted": data.was_ghosted, "comment": data.comment or None
                }
            )
            row = dict(result.mappings().one())
    except IntegrityError:
        raise ValidationError(ALREADY_REVIEWED)

    return ReviewResponse(**row)
