"""
Relational schema - every table the service reads and writes.

Declared with SQLAlchemy Core so the same definitions create the tables on
PostgreSQL (production) and SQLite (tests). Queries are written by hand with
sqlalchemy.text against these table/column names.

Composite unique constraints:
- applications (job_id, user_id)          one application per student per job
- career_center_reviews (reviewer_id, company_id)   upsert target
- interview_feedback (interview_id, recipient_role)  one row per participant
"""

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer,
    MetaData, String, Table, Text, UniqueConstraint, func,
)

metadata = MetaData()


def _rating(name: str, low: int = 1, high: int = 5) -> tuple:
    return (
        Column(name, Integer, nullable=False),
        CheckConstraint(f"{name} BETWEEN {low} AND {high}", name=f"ck_{name}_range"),
    )


companies = Table(
    "companies", metadata,
    Column("company_id", Integer, primary_key=True),
    Column("name", String(200), nullable=False),
    Column("logo", String(500)),
    Column("website", String(500)),
    Column("description", Text),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
    Column("updated_at", DateTime, server_default=func.now(), nullable=False),
)

users = Table(
    "users", metadata,
    Column("user_id", Integer, primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("name", String(200), nullable=False),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False),
    # Employer accounts belong to at most one company
    Column("company_id", Integer, ForeignKey("companies.company_id", ondelete="SET NULL")),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
    CheckConstraint("role IN ('STUDENT', 'EMPLOYER', 'ADMIN')", name="ck_users_role"),
)

student_profiles = Table(
    "student_profiles", metadata,
    Column("profile_id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, unique=True),
    Column("phone", String(50)),
    Column("location", String(200)),
    Column("work_auth", String(40)),
    Column("bio", Text),
    Column("university", String(200)),
    Column("major", String(200)),
    Column("minor", String(200)),
    Column("grad_year", Integer),
    Column("gpa", Float),
    # JSON-encoded lists of strings
    Column("coursework", Text, nullable=False, server_default="[]"),
    Column("honors", Text, nullable=False, server_default="[]"),
    Column("linkedin", String(500)),
    Column("github", String(500)),
    Column("portfolio", String(500)),
    Column("resume_url", String(1000)),
    Column("cover_letter_url", String(1000)),
    Column("transcript_url", String(1000)),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
    Column("updated_at", DateTime, server_default=func.now(), nullable=False),
)

skills = Table(
    "skills", metadata,
    Column("skill_id", Integer, primary_key=True),
    Column("skill_name", String(100), nullable=False, unique=True),
)

student_skills = Table(
    "student_skills", metadata,
    Column("profile_id", Integer, ForeignKey("student_profiles.profile_id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.skill_id", ondelete="CASCADE"), primary_key=True),
)

work_experiences = Table(
    "work_experiences", metadata,
    Column("experience_id", Integer, primary_key=True),
    Column("profile_id", Integer, ForeignKey("student_profiles.profile_id", ondelete="CASCADE"), nullable=False),
    Column("company", String(200), nullable=False),
    Column("title", String(200), nullable=False),
    Column("location", String(200)),
    Column("start_date", DateTime, nullable=False),
    Column("end_date", DateTime),
    Column("is_current", Boolean, nullable=False, server_default="0"),
    Column("description", Text),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
)

projects = Table(
    "projects", metadata,
    Column("project_id", Integer, primary_key=True),
    Column("profile_id", Integer, ForeignKey("student_profiles.profile_id", ondelete="CASCADE"), nullable=False),
    Column("name", String(200), nullable=False),
    Column("description", Text),
    Column("url", String(1000)),
    Column("technologies", Text, nullable=False, server_default="[]"),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
)

jobs = Table(
    "jobs", metadata,
    Column("job_id", Integer, primary_key=True),
    Column("company_id", Integer, ForeignKey("companies.company_id", ondelete="CASCADE"), nullable=False),
    Column("title", String(200), nullable=False),
    Column("description", Text, nullable=False),
    Column("location", String(200)),
    Column("job_type", String(20), nullable=False),
    Column("salary", String(100)),
    Column("deadline", DateTime),
    Column("is_active", Boolean, nullable=False, server_default="1"),
    Column("requires_resume", Boolean, nullable=False, server_default="0"),
    Column("requires_cover_letter", Boolean, nullable=False, server_default="0"),
    Column("requires_transcript", Boolean, nullable=False, server_default="0"),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
    Column("updated_at", DateTime, server_default=func.now(), nullable=False),
    CheckConstraint(
        "job_type IN ('INTERNSHIP', 'FULL_TIME', 'PART_TIME', 'CONTRACT')", name="ck_jobs_type"
    ),
)

applications = Table(
    "applications", metadata,
    Column("application_id", Integer, primary_key=True),
    Column("job_id", Integer, ForeignKey("jobs.job_id", ondelete="CASCADE"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("status", String(20), nullable=False, server_default="PENDING"),
    Column("cover_note", Text),
    Column("resume_url", String(1000)),
    Column("cover_letter_url", String(1000)),
    Column("transcript_url", String(1000)),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
    Column("updated_at", DateTime, server_default=func.now(), nullable=False),
    UniqueConstraint("job_id", "user_id", name="uq_applications_job_user"),
)

interviews = Table(
    "interviews", metadata,
    Column("interview_id", Integer, primary_key=True),
    Column("application_id", Integer, ForeignKey("applications.application_id", ondelete="CASCADE"), nullable=False),
    Column("duration", Integer, nullable=False, server_default="30"),
    Column("status", String(20), nullable=False, server_default="PENDING_RESPONSE"),
    Column("scheduled_at", DateTime),
    Column("room_name", String(200)),
    Column("room_url", String(500)),
    Column("transcription", Text),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
    Column("updated_at", DateTime, server_default=func.now(), nullable=False),
)

interview_time_slots = Table(
    "interview_time_slots", metadata,
    Column("slot_id", Integer, primary_key=True),
    Column("interview_id", Integer, ForeignKey("interviews.interview_id", ondelete="CASCADE"), nullable=False),
    Column("start_time", DateTime, nullable=False),
    Column("selected", Boolean, nullable=False, server_default="0"),
)

interview_feedback = Table(
    "interview_feedback", metadata,
    Column("feedback_id", Integer, primary_key=True),
    Column("interview_id", Integer, ForeignKey("interviews.interview_id", ondelete="CASCADE"), nullable=False),
    Column("recipient_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("recipient_role", String(20), nullable=False),
    *_rating("clarity_score", 1, 10),
    *_rating("pacing_score", 1, 10),
    *_rating("engagement_score", 1, 10),
    Column("suggestions", Text, nullable=False),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
    UniqueConstraint("interview_id", "recipient_role", name="uq_feedback_interview_role"),
)

reviews = Table(
    "reviews", metadata,
    Column("review_id", Integer, primary_key=True),
    Column("application_id", Integer, ForeignKey("applications.application_id", ondelete="CASCADE"),
           nullable=False, unique=True),
    Column("reviewer_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("company_id", Integer, ForeignKey("companies.company_id", ondelete="CASCADE"), nullable=False),
    *_rating("responsiveness"),
    *_rating("transparency"),
    *_rating("professionalism"),
    *_rating("interview_experience"),
    *_rating("overall"),
    Column("was_ghosted", Boolean, nullable=False, server_default="0"),
    Column("comment", Text),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
)

career_center_reviews = Table(
    "career_center_reviews", metadata,
    Column("review_id", Integer, primary_key=True),
    Column("reviewer_id", Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
    Column("company_id", Integer, ForeignKey("companies.company_id", ondelete="CASCADE"), nullable=False),
    *_rating("student_treatment"),
    *_rating("feedback_timeliness"),
    *_rating("hiring_success"),
    *_rating("would_recommend"),
    Column("comment", Text),
    Column("created_at", DateTime, server_default=func.now(), nullable=False),
    Column("updated_at", DateTime, server_default=func.now(), nullable=False),
    UniqueConstraint("reviewer_id", "company_id", name="uq_career_center_reviews_reviewer_company"),
)


def init_db(engine) -> None:
    """Create all tables that do not exist yet."""
    metadata.create_all(bind=engine)


def reset_db(engine) -> None:
    """Drop and recreate every table. Destroys data."""
    metadata.drop_all(bind=engine)
    metadata.create_all(bind=engine)
