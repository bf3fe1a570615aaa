"""
Company Routes

GET /companies/{company_id} - Public company profile with ratings
"""

from fastapi import APIRouter, Depends
from typing import Optional

from careerhub.db.postgres import get_db_session, fetch_all, fetch_one
from careerhub.core.auth import get_optional_user
from careerhub.core.exceptions import NotFoundError
from careerhub.schemas.schemas import CompanyJobSummary, CompanyProfileResponse
from careerhub.services.review_service import fetch_company_reviews, reputation, to_company_review

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("/{company_id}", response_model=CompanyProfileResponse)
async def get_company_profile(company_id: int, user: Optional[dict] = Depends(get_optional_user)):
    """
    Public company page: active jobs plus ratings derived from student reviews.
    Individual reviews, anonymised to the reviewer's initial, are only
    included for signed-in callers.
    """
    with get_db_session() as db:
        company = fetch_one(
            db,
            "SELECT company_id, name, logo, website, description FROM companies WHERE company_id = :id",
            {"id": company_id}
        )
        if not company:
            raise NotFoundError("Company not found")

        jobs = fetch_all(
            db,
            """
            SELECT job_id, title, location, job_type, created_at FROM jobs
            WHERE company_id = :id AND is_active = TRUE
            ORDER BY created_at DESC, job_id DESC
            """,
            {"id": company_id}
        )
        reviews = fetch_company_reviews(db, company_id)

    summary, ghosting_rate, high_ghosting = reputation(reviews)

    return CompanyProfileResponse(
        **company,
        jobs=[CompanyJobSummary(**j) for j in jobs],
        review_count=len(reviews),
        aggregate_ratings=summary,
        ghosting_rate=ghosting_rate,
        high_ghosting=high_ghosting,
        reviews=[to_company_review(r, with_initial=True) for r in reviews] if user else None,
    )
