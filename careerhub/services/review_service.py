"""
Review queries shared by the student, employer, company and admin pages.

Aggregates are computed by careerhub.services.reputation from the rows
returned here, on every request.
"""

from typing import List, Optional, Tuple

from careerhub.db.postgres import fetch_all
from careerhub.schemas.schemas import CompanyReview, RatingSummary
from careerhub.services.reputation import (
    aggregate_ratings, compute_ghosting_rate, is_high_ghosting, reviewer_initial,
)


def fetch_company_reviews(db, company_id: int) -> List[dict]:
    """Student reviews of a company, newest first, with job title and reviewer name."""
    return fetch_all(
        db,
        """
        SELECT r.review_id, r.responsiveness, r.transparency, r.professionalism,
               r.interview_experience, r.overall, r.was_ghosted, r.comment, r.created_at,
               j.title AS job_title, u.name AS reviewer_name
        FROM reviews r
        JOIN applications a ON r.application_id = a.application_id
        JOIN jobs j ON a.job_id = j.job_id
        JOIN users u ON r.reviewer_id = u.user_id
        WHERE r.company_id = :cid
        ORDER BY r.created_at DESC, r.review_id DESC
        """,
        {"cid": company_id}
    )


def to_company_review(row: dict, with_initial: bool = False) -> CompanyReview:
    review = CompanyReview(**{k: v for k, v in row.items() if k != "reviewer_name"})
    if with_initial:
        review.reviewer_initial = reviewer_initial(row["reviewer_name"])
    return review


def reputation(reviews: List[dict]) -> Tuple[Optional[RatingSummary], int, bool]:
    """(aggregate ratings, ghosting rate, high-ghosting flag) for a review set."""
    rate = compute_ghosting_rate(reviews)
    return aggregate_ratings(reviews), rate, is_high_ghosting(rate)
