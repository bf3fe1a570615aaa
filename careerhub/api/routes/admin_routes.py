"""
Admin Routes (career center staff)

GET /admin/employers - Employer analytics table with summary counts
GET /admin/reviews - Own career-center reviews, or one company's review page
POST /admin/reviews - Create or update own review of a company
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text
from typing import List, Optional, Union

from careerhub.db.postgres import get_db_session, fetch_all, fetch_one
from careerhub.core.auth import require_admin
from careerhub.core.exceptions import NotFoundError
from careerhub.schemas.schemas import (
    AdminCompanyReviewResponse, AdminSummary, CareerCenterReviewCreate, CareerCenterReviewResponse,
    CompanySummary, EmployerAnalyticsResponse, EmployerStats
)
from careerhub.services.reputation import CAREER_CENTER_DIMENSIONS, RATING_DIMENSIONS, validate_ratings
from careerhub.services.review_service import fetch_company_reviews, reputation, to_company_review

router = APIRouter(prefix="/admin", tags=["Admin"])

CAREER_CENTER_COLUMNS = """
    review_id, reviewer_id, company_id, student_treatment, feedback_timeliness,
    hiring_success, would_recommend, comment, created_at, updated_at
"""


@router.get("/employers", response_model=EmployerAnalyticsResponse)
async def get_employer_analytics(admin: dict = Depends(require_admin)):
    """Per-company ratings and activity, ordered by company name."""
    with get_db_session() as db:
        companies = fetch_all(
            db,
            """
            SELECT c.company_id, c.name, c.logo,
                   (SELECT COUNT(*) FROM jobs j
                    WHERE j.company_id = c.company_id AND j.is_active = TRUE) AS active_jobs,
                   (SELECT COUNT(*) FROM career_center_reviews ccr
                    WHERE ccr.company_id = c.company_id AND ccr.reviewer_id = :uid) AS admin_reviews
            FROM companies c
            ORDER BY c.name, c.company_id
            """,
            {"uid": admin["user_id"]}
        )
        all_reviews = fetch_all(
            db,
            f"SELECT company_id, was_ghosted, {', '.join(RATING_DIMENSIONS)} FROM reviews"
        )

    reviews_by_company = {}
    for review in all_reviews:
        reviews_by_company.setdefault(review["company_id"], []).append(review)

    employers = []
    for company in companies:
        reviews = reviews_by_company.get(company["company_id"], [])
        summary, ghosting_rate, high_ghosting = reputation(reviews)
        employers.append(EmployerStats(
            company_id=company["company_id"],
            name=company["name"],
            logo=company["logo"],
            active_jobs=company["active_jobs"],
            review_count=len(reviews),
            has_admin_review=company["admin_reviews"] > 0,
            average_rating=summary.overall if summary else None,
            ghosting_rate=ghosting_rate,
            high_ghosting=high_ghosting,
            responsiveness=summary.responsiveness if summary else None,
            transparency=summary.transparency if summary else None,
            professionalism=summary.professionalism if summary else None,
            interview_experience=summary.interview_experience if summary else None,
        ))

    summary = AdminSummary(
        total_employers=len(employers),
        employers_with_reviews=sum(1 for e in employers if e.review_count > 0),
        high_ghosting_employers=sum(1 for e in employers if e.high_ghosting),
        pending_admin_reviews=sum(1 for e in employers if e.review_count > 0 and not e.has_admin_review),
    )
    return EmployerAnalyticsResponse(summary=summary, employers=employers)


@router.get("/reviews", response_model=Union[AdminCompanyReviewResponse, List[CareerCenterReviewResponse]])
async def get_admin_reviews(
    company: Optional[int] = Query(None, description="Company to open the review page for"),
    admin: dict = Depends(require_admin)
):
    """
    Without ?company: every career-center review the caller has written.
    With ?company: that company's student reviews, aggregates and the
    caller's own review of it.
    """
    with get_db_session() as db:
        if company is None:
            rows = fetch_all(
                db,
                """
                SELECT ccr.review_id, ccr.reviewer_id, ccr.company_id, ccr.student_treatment,
                       ccr.feedback_timeliness, ccr.hiring_success, ccr.would_recommend, ccr.comment,
                       ccr.created_at, ccr.updated_at,
                       c.name AS company_name, c.logo AS company_logo
                FROM career_center_reviews ccr
                JOIN companies c ON ccr.company_id = c.company_id
                WHERE ccr.reviewer_id = :uid
                ORDER BY ccr.created_at DESC, ccr.review_id DESC
                """,
                {"uid": admin["user_id"]}
            )
            return [
                CareerCenterReviewResponse(
                    **row,
                    company=CompanySummary(company_id=row["company_id"], name=row["company_name"], logo=row["company_logo"]),
                )
                for row in rows
            ]

        target = fetch_one(
            db, "SELECT company_id, name, logo FROM companies WHERE company_id = :id", {"id": company}
        )
        if not target:
            raise NotFoundError("Company not found")

        reviews = fetch_company_reviews(db, company)
        own = fetch_one(
            db,
            f"SELECT {CAREER_CENTER_COLUMNS} FROM career_center_reviews WHERE reviewer_id = :uid AND company_id = :cid",
            {"uid": admin["user_id"], "cid": company}
        )

    summary, ghosting_rate, high_ghosting = reputation(reviews)
    return AdminCompanyReviewResponse(
        company=CompanySummary(**target),
        student_reviews=[to_company_review(r) for r in reviews],
        aggregate_ratings=summary,
        ghosting_rate=ghosting_rate,
        high_ghosting=high_ghosting,
        review_count=len(reviews),
        admin_review=CareerCenterReviewResponse(**own) if own else None,
    )


@router.post("/reviews", response_model=CareerCenterReviewResponse)
async def upsert_admin_review(data: CareerCenterReviewCreate, admin: dict = Depends(require_admin)):
    """One review per admin per company; a second submission overwrites the first."""
    validate_ratings(getattr(data, dim) for dim in CAREER_CENTER_DIMENSIONS)

    with get_db_session() as db:
        if not fetch_one(db, "SELECT company_id FROM companies WHERE company_id = :id", {"id": data.company_id}):
            raise NotFoundError("Company not found")

        # Single statement, so concurrent submissions cannot create two rows
        result = db.execute(
            text(f"""
                INSERT INTO career_center_reviews (reviewer_id, company_id, student_treatment,
                    feedback_timeliness, hiring_success, would_recommend, comment)
                VALUES (:reviewer_id, :company_id, :student_treatment,
                    :feedback_timeliness, :hiring_success, :would_recommend, :comment)
                ON CONFLICT (reviewer_id, company_id) DO UPDATE SET
                    student_treatment = excluded.student_treatment,
                    feedback_timeliness = excluded.feedback_timeliness,
                    hiring_success = excluded.hiring_success,
                    would_recommend = excluded.would_recommend,
                    comment = excluded.comment,
                    updated_at = CURRENT_TIMESTAMP
                RETURNING {CAREER_CENTER_COLUMNS}
            """),
            {
                "reviewer_id": admin["user_id"], "company_id": data.company_id,
                **{dim: getattr(data, dim) for dim in CAREER_CENTER_DIMENSIONS},
                "comment": data.comment or None
            }
        )
        row = dict(result.mappings().one())

    return CareerCenterReviewResponse(**row)
