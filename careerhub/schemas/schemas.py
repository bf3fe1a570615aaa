"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Ratings are plain ints here; range checks live in the services so that an
out-of-range rating is a 400 with a readable message, like every other
rejected write.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "STUDENT"
    employer = "EMPLOYER"
    admin = "ADMIN"


class JobType(str, Enum):
    internship = "INTERNSHIP"
    full_time = "FULL_TIME"
    part_time = "PART_TIME"
    contract = "CONTRACT"


class ApplicationStatus(str, Enum):
    pending = "PENDING"
    reviewing = "REVIEWING"
    interview = "INTERVIEW"
    offered = "OFFERED"
    rejected = "REJECTED"
    withdrawn = "WITHDRAWN"


class InterviewStatus(str, Enum):
    pending_response = "PENDING_RESPONSE"
    scheduled = "SCHEDULED"
    in_progress = "IN_PROGRESS"
    completed = "COMPLETED"
    cancelled = "CANCELLED"


class WorkAuthorization(str, Enum):
    us_citizen = "US_CITIZEN"
    permanent_resident = "PERMANENT_RESIDENT"
    work_visa = "WORK_VISA"
    student_visa = "STUDENT_VISA"
    require_sponsorship = "REQUIRE_SPONSORSHIP"
    other = "OTHER"


class DocumentType(str, Enum):
    resume = "resume"
    cover_letter = "cover_letter"
    transcript = "transcript"
    other = "other"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1, max_length=200)
    role: UserRole

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class UserResponse(BaseModel):
    user_id: int
    email: str
    name: str
    role: str
    company_id: Optional[int] = None
    created_at: datetime


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    website: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None

class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    website: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None

class CompanySummary(BaseModel):
    company_id: int
    name: str
    logo: Optional[str] = None

class CompanyResponse(BaseModel):
    company_id: int
    name: str
    logo: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=1)
    location: Optional[str] = None
    job_type: JobType = JobType.full_time
    salary: Optional[str] = None
    deadline: Optional[datetime] = None
    requires_resume: bool = False
    requires_cover_letter: bool = False
    requires_transcript: bool = False

class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[JobType] = None
    salary: Optional[str] = None
    deadline: Optional[datetime] = None
    is_active: Optional[bool] = None
    requires_resume: Optional[bool] = None
    requires_cover_letter: Optional[bool] = None
    requires_transcript: Optional[bool] = None

class JobResponse(BaseModel):
    job_id: int
    company: CompanySummary
    title: str
    description: str
    location: Optional[str] = None
    job_type: str
    salary: Optional[str] = None
    deadline: Optional[datetime] = None
    is_active: bool
    requires_resume: bool
    requires_cover_letter: bool
    requires_transcript: bool
    application_count: int = 0
    created_at: datetime

class JobDetailResponse(JobResponse):
    company_website: Optional[str] = None
    company_description: Optional[str] = None
    has_applied: bool = False


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    job_id: int
    cover_note: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter_url: Optional[str] = None
    transcript_url: Optional[str] = None

class ApplicationStatusUpdate(BaseModel):
    application_id: int
    status: ApplicationStatus

class InterviewSummary(BaseModel):
    interview_id: int
    status: str
    scheduled_at: Optional[datetime] = None

class ApplicationResponse(BaseModel):
    application_id: int
    job_id: int
    job_title: str
    company: CompanySummary
    status: str
    cover_note: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter_url: Optional[str] = None
    transcript_url: Optional[str] = None
    latest_interview: Optional[InterviewSummary] = None
    created_at: datetime

class ApplicantInfo(BaseModel):
    user_id: int
    name: str
    email: str
    university: Optional[str] = None
    major: Optional[str] = None
    grad_year: Optional[int] = None
    gpa: Optional[float] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None

class ApplicantResponse(BaseModel):
    application_id: int
    job_id: int
    job_title: str
    status: str
    cover_note: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter_url: Optional[str] = None
    transcript_url: Optional[str] = None
    applicant: ApplicantInfo
    created_at: datetime


# ============================================================
# INTERVIEW SCHEMAS
# ============================================================

class TimeSlotCreate(BaseModel):
    start_time: datetime

class InterviewCreate(BaseModel):
    application_id: int
    duration: int = Field(30, ge=5, le=480)
    time_slots: List[TimeSlotCreate] = []

class InterviewStatusUpdate(BaseModel):
    status: InterviewStatus

class SlotSelection(BaseModel):
    slot_id: int

class TimeSlotResponse(BaseModel):
    slot_id: int
    start_time: datetime
    selected: bool

class FeedbackResponse(BaseModel):
    feedback_id: int
    interview_id: int
    recipient_id: int
    recipient_role: str
    clarity_score: int
    pacing_score: int
    engagement_score: int
    suggestions: str
    created_at: datetime

class ParticipantInfo(BaseModel):
    user_id: int
    name: str
    email: str

class InterviewResponse(BaseModel):
    interview_id: int
    application_id: int
    duration: int
    status: str
    scheduled_at: Optional[datetime] = None
    room_name: Optional[str] = None
    room_url: Optional[str] = None
    job_id: int
    job_title: str
    company: CompanySummary
    candidate: ParticipantInfo
    time_slots: List[TimeSlotResponse] = []
    feedback: List[FeedbackResponse] = []
    created_at: datetime

class RoomResponse(BaseModel):
    room_url: str
    room_name: str

class AnalyzeResponse(BaseModel):
    message: str
    feedback: Optional[FeedbackResponse] = None

class InterviewFeedbackView(BaseModel):
    interview_id: int
    transcription: Optional[str] = None
    feedback: List[FeedbackResponse] = []


# ============================================================
# REVIEW SCHEMAS
# ============================================================

class ReviewCreate(BaseModel):
    application_id: int
    responsiveness: int
    transparency: int
    professionalism: int
    interview_experience: int
    overall: int
    was_ghosted: bool = False
    comment: Optional[str] = None

class ReviewResponse(BaseModel):
    review_id: int
    application_id: int
    company_id: int
    responsiveness: int
    transparency: int
    professionalism: int
    interview_experience: int
    overall: int
    was_ghosted: bool
    comment: Optional[str] = None
    created_at: datetime

class RatingSummary(BaseModel):
    responsiveness: float
    transparency: float
    professionalism: float
    interview_experience: float
    overall: float

class CompanyReview(BaseModel):
    review_id: int
    responsiveness: int
    transparency: int
    professionalism: int
    interview_experience: int
    overall: int
    was_ghosted: bool
    comment: Optional[str] = None
    job_title: str
    reviewer_initial: Optional[str] = None
    created_at: datetime

class ReviewableApplication(BaseModel):
    application_id: int
    job_id: int
    job_title: str
    company: CompanySummary
    latest_interview: Optional[InterviewSummary] = None
    review: Optional[ReviewResponse] = None

class StudentReviewsResponse(BaseModel):
    pending: List[ReviewableApplication]
    submitted: List[ReviewableApplication]

class CompanyJobSummary(BaseModel):
    job_id: int
    title: str
    location: Optional[str] = None
    job_type: str
    created_at: datetime

class CompanyProfileResponse(BaseModel):
    company_id: int
    name: str
    logo: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    jobs: List[CompanyJobSummary] = []
    review_count: int
    aggregate_ratings: Optional[RatingSummary] = None
    ghosting_rate: int
    high_ghosting: bool
    # Only sent to signed-in callers
    reviews: Optional[List[CompanyReview]] = None

class EmployerReviewsResponse(BaseModel):
    company: CompanySummary
    review_count: int
    aggregate_ratings: Optional[RatingSummary] = None
    ghosting_rate: int
    high_ghosting: bool
    tips: List[str] = []
    reviews: List[CompanyReview] = []


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class CareerCenterReviewCreate(BaseModel):
    company_id: int
    student_treatment: int
    feedback_timeliness: int
    hiring_success: int
    would_recommend: int
    comment: Optional[str] = None

class CareerCenterReviewResponse(BaseModel):
    review_id: int
    reviewer_id: int
    company_id: int
    student_treatment: int
    feedback_timeliness: int
    hiring_success: int
    would_recommend: int
    comment: Optional[str] = None
    company: Optional[CompanySummary] = None
    created_at: datetime
    updated_at: datetime

class EmployerStats(BaseModel):
    company_id: int
    name: str
    logo: Optional[str] = None
    active_jobs: int
    review_count: int
    has_admin_review: bool
    average_rating: Optional[float] = None
    ghosting_rate: int
    high_ghosting: bool
    responsiveness: Optional[float] = None
    transparency: Optional[float] = None
    professionalism: Optional[float] = None
    interview_experience: Optional[float] = None

class AdminSummary(BaseModel):
    total_employers: int
    employers_with_reviews: int
    high_ghosting_employers: int
    pending_admin_reviews: int

class EmployerAnalyticsResponse(BaseModel):
    summary: AdminSummary
    employers: List[EmployerStats]

class AdminCompanyReviewResponse(BaseModel):
    company: CompanySummary
    student_reviews: List[CompanyReview]
    aggregate_ratings: Optional[RatingSummary] = None
    ghosting_rate: int
    high_ghosting: bool
    review_count: int
    admin_review: Optional[CareerCenterReviewResponse] = None


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = None
    location: Optional[str] = None
    work_auth: Optional[WorkAuthorization] = None
    bio: Optional[str] = None
    university: Optional[str] = None
    major: Optional[str] = None
    minor: Optional[str] = None
    grad_year: Optional[int] = Field(None, ge=1950, le=2100)
    gpa: Optional[float] = Field(None, ge=0, le=5)
    skills: Optional[List[str]] = None
    coursework: Optional[List[str]] = None
    honors: Optional[List[str]] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter_url: Optional[str] = None
    transcript_url: Optional[str] = None

    @field_validator("skills", "coursework", "honors")
    @classmethod
    def strip_items(cls, value):
        if value is None:
            return value
        # Drop blanks and duplicates, keep first-seen order
        seen = []
        for item in value:
            item = item.strip()
            if item and item not in seen:
                seen.append(item)
        return seen

class ExperienceCreate(BaseModel):
    company: str = Field(..., min_length=1, max_length=200)
    title: str = Field(..., min_length=1, max_length=200)
    location: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    current: bool = False
    description: Optional[str] = None

class ExperienceUpdate(ExperienceCreate):
    experience_id: int

class ExperienceResponse(BaseModel):
    experience_id: int
    company: str
    title: str
    location: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    current: bool
    description: Optional[str] = None

class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    url: Optional[str] = None
    technologies: List[str] = []

class ProjectUpdate(ProjectCreate):
    project_id: int

class ProjectResponse(BaseModel):
    project_id: int
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    technologies: List[str] = []

class StudentProfileResponse(BaseModel):
    profile_id: int
    phone: Optional[str] = None
    location: Optional[str] = None
    work_auth: Optional[str] = None
    bio: Optional[str] = None
    university: Optional[str] = None
    major: Optional[str] = None
    minor: Optional[str] = None
    grad_year: Optional[int] = None
    gpa: Optional[float] = None
    skills: List[str] = []
    coursework: List[str] = []
    honors: List[str] = []
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter_url: Optional[str] = None
    transcript_url: Optional[str] = None
    experiences: List[ExperienceResponse] = []
    projects: List[ProjectResponse] = []

class ProfileResponse(BaseModel):
    user_id: int
    email: str
    name: str
    role: str
    company_id: Optional[int] = None
    created_at: datetime
    student_profile: Optional[StudentProfileResponse] = None


# ============================================================
# UPLOAD SCHEMAS
# ============================================================

class UploadResponse(BaseModel):
    url: str


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True