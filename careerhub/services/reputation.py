"""
Reputation Service - company ratings derived from student reviews.

Nothing here is stored: every figure is recomputed from the review rows
each time a page asks for it.

- Each rating dimension is the arithmetic mean across reviews, rounded
  half-up to one decimal (4.25 -> 4.3).
- Ghosting rate is the integer percentage of reviews that report being
  ghosted, rounded half-up (1 of 8 -> 13).
- A company with ghosting rate strictly above the threshold (25) is
  flagged as high ghosting.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from careerhub.core.config import get_settings
from careerhub.core.exceptions import ValidationError
from careerhub.schemas.schemas import RatingSummary

RATING_DIMENSIONS = (
    "responsiveness",
    "transparency",
    "professionalism",
    "interview_experience",
    "overall",
)

CAREER_CENTER_DIMENSIONS = (
    "student_treatment",
    "feedback_timeliness",
    "hiring_success",
    "would_recommend",
)

MIN_RATING = 1
MAX_RATING = 5

# Employer coaching thresholds
TIP_RATING_THRESHOLD = 4
TIP_GHOSTING_THRESHOLD = 10

IMPROVEMENT_TIPS = {
    "responsiveness": "Respond to candidates within 48 hours to improve responsiveness ratings",
    "transparency": "Include salary range and timeline expectations in job postings",
    "professionalism": "Review candidate materials before interviews and be on time",
    "interview_experience": "Use consistent, job-relevant questions and provide feedback",
}
GHOSTING_TIP = "Always send rejection emails - ghosting severely impacts your reputation"
PRAISE_TIP = "Great work! Your ratings are excellent. Keep it up!"


def validate_ratings(values: Iterable) -> None:
    """Reject the write unless every rating is an integer in [1, 5]."""
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
            raise ValidationError(f"Ratings must be between {MIN_RATING} and {MAX_RATING}")


def _mean(total: int, count: int) -> float:
    value = (Decimal(total) / Decimal(count)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(value)


def compute_ghosting_rate(reviews: List[dict]) -> int:
    if not reviews:
        return 0
    ghosted = sum(1 for r in reviews if r["was_ghosted"])
    rate = (Decimal(ghosted) * 100 / Decimal(len(reviews))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(rate)


def aggregate_ratings(reviews: List[dict]) -> Optional[RatingSummary]:
    """Mean of every rating dimension, or None when there are no reviews."""
    if not reviews:
        return None
    count = len(reviews)
    return RatingSummary(**{
        dim: _mean(sum(int(r[dim]) for r in reviews), count) for dim in RATING_DIMENSIONS
    })


def is_high_ghosting(ghosting_rate: int) -> bool:
    return ghosting_rate > get_settings().high_ghosting_threshold


def improvement_tips(summary: Optional[RatingSummary], ghosting_rate: int) -> List[str]:
    """Coaching tips shown to employers next to their ratings."""
    if summary is None:
        return []

    tips = [
        tip for dim, tip in IMPROVEMENT_TIPS.items()
        if getattr(summary, dim) < TIP_RATING_THRESHOLD
    ]
    if ghosting_rate > TIP_GHOSTING_THRESHOLD:
        tips.append(GHOSTING_TIP)

    all_good = all(getattr(summary, dim) >= TIP_RATING_THRESHOLD for dim in RATING_DIMENSIONS)
    if all_good and ghosting_rate <= TIP_GHOSTING_THRESHOLD:
        tips.append(PRAISE_TIP)
    return tips


def reviewer_initial(name: Optional[str]) -> str:
    """Anonymised reviewer label for public company pages."""
    if not name:
        return "?"
    return name.strip()[:1].upper() or "?"
