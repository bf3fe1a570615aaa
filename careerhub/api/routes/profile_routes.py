"""
Profile Routes

GET /profile - Own account, plus the student profile for students
PUT /profile - Update name; students also upsert their profile
POST /profile/experience - Add work experience (student only)
PUT /profile/experience - Update own work experience
DELETE /profile/experience?id= - Delete own work experience
POST /profile/projects - Add project (student only)
PUT /profile/projects - Update own project
"""

import json

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text
from typing import List, Optional

from careerhub.db.postgres import get_db_session, fetch_all, fetch_one
from careerhub.core.auth import get_current_user, require_student
from careerhub.core.exceptions import AuthorizationError, NotFoundError
from careerhub.schemas.schemas import (
    ExperienceCreate, ExperienceResponse, ExperienceUpdate, MessageResponse, ProfileResponse,
    ProfileUpdate, ProjectCreate, ProjectResponse, ProjectUpdate, StudentProfileResponse
)

router = APIRouter(prefix="/profile", tags=["Profile"])

# Scalar student_profiles columns settable through PUT /profile
PROFILE_FIELDS = [
    "phone", "location", "work_auth", "bio", "university", "major", "minor", "grad_year", "gpa",
    "linkedin", "github", "portfolio", "resume_url", "cover_letter_url", "transcript_url",
]
# Stored as JSON text
LIST_FIELDS = ["coursework", "honors"]

EXPERIENCE_COLUMNS = (
    'experience_id, company, title, location, start_date, end_date, is_current AS "current", description'
)
PROJECT_COLUMNS = "project_id, name, description, url, technologies"


def _get_profile_id(db, user_id: int) -> Optional[int]:
    row = fetch_one(db, "SELECT profile_id FROM student_profiles WHERE user_id = :uid", {"uid": user_id})
    return row["profile_id"] if row else None


def _require_profile_id(db, user_id: int) -> int:
    profile_id = _get_profile_id(db, user_id)
    if profile_id is None:
        raise NotFoundError("Profile not found")
    return profile_id


def _project_from_row(row: dict) -> ProjectResponse:
    return ProjectResponse(**{**row, "technologies": json.loads(row["technologies"] or "[]")})


def _load_student_profile(db, user_id: int) -> Optional[StudentProfileResponse]:
    profile = fetch_one(
        db,
        f"SELECT profile_id, {', '.join(PROFILE_FIELDS + LIST_FIELDS)} FROM student_profiles WHERE user_id = :uid",
        {"uid": user_id}
    )
    if not profile:
        return None

    for field in LIST_FIELDS:
        profile[field] = json.loads(profile[field] or "[]")

    skills = fetch_all(
        db,
        """
        SELECT sk.skill_name FROM student_skills ss
        JOIN skills sk ON ss.skill_id = sk.skill_id
        WHERE ss.profile_id = :id ORDER BY sk.skill_name
        """,
        {"id": profile["profile_id"]}
    )
    experiences = fetch_all(
        db,
        f"""
        SELECT {EXPERIENCE_COLUMNS} FROM work_experiences
        WHERE profile_id = :id ORDER BY start_date DESC, experience_id DESC
        """,
        {"id": profile["profile_id"]}
    )
    projects = fetch_all(
        db,
        f"SELECT {PROJECT_COLUMNS} FROM projects WHERE profile_id = :id ORDER BY created_at, project_id",
        {"id": profile["profile_id"]}
    )

    return StudentProfileResponse(
        **profile,
        skills=[s["skill_name"] for s in skills],
        experiences=[ExperienceResponse(**e) for e in experiences],
        projects=[_project_from_row(p) for p in projects],
    )


def _load_profile(db, user_id: int) -> ProfileResponse:
    user = fetch_one(
        db,
        "SELECT user_id, email, name, role, company_id, created_at FROM users WHERE user_id = :id",
        {"id": user_id}
    )
    if not user:
        raise NotFoundError("User not found")
    student_profile = _load_student_profile(db, user_id) if user["role"] == "STUDENT" else None
    return ProfileResponse(**user, student_profile=student_profile)


def _replace_skills(db, profile_id: int, skill_names: List[str]) -> None:
    db.execute(text("DELETE FROM student_skills WHERE profile_id = :id"), {"id": profile_id})
    for skill_name in skill_names:
        # Find or create skill
        result = db.execute(
            text("""
                INSERT INTO skills (skill_name) VALUES (:name)
                ON CONFLICT (skill_name) DO UPDATE SET skill_name = EXCLUDED.skill_name
                RETURNING skill_id
            """),
            {"name": skill_name}
        )
        skill_id = result.scalar_one()
        db.execute(
            text("INSERT INTO student_skills (profile_id, skill_id) VALUES (:pid, :sid)"),
            {"pid": profile_id, "sid": skill_id}
        )


@router.get("", response_model=ProfileResponse)
async def get_profile(user: dict = Depends(get_current_user)):
    with get_db_session() as db:
        return _load_profile(db, user["user_id"])


@router.put("", response_model=ProfileResponse)
async def update_profile(data: ProfileUpdate, user: dict = Depends(get_current_user)):
    """
    Update the caller's profile. Only provided fields change.
    Students get a student profile created on their first update.
    """
    provided = data.model_dump(exclude_unset=True)

    with get_db_session() as db:
        if provided.get("name"):
            db.execute(
                text("UPDATE users SET name = :name WHERE user_id = :id"),
                {"name": provided["name"].strip(), "id": user["user_id"]}
            )

        if user["role"] == "STUDENT":
            params = {f: provided[f] for f in PROFILE_FIELDS if f in provided}
            if params.get("work_auth") is not None:
                params["work_auth"] = params["work_auth"].value
            for field in LIST_FIELDS:
                if field in provided:
                    params[field] = json.dumps(provided[field] or [])

            profile_id = _get_profile_id(db, user["user_id"])
            if profile_id is None:
                columns = ["user_id"] + list(params)
                result = db.execute(
                    text(f"""
                        INSERT INTO student_profiles ({', '.join(columns)})
                        VALUES ({', '.join(':' + c for c in columns)})
                        RETURNING profile_id
                    """),
                    {**params, "user_id": user["user_id"]}
                )
                profile_id = result.scalar_one()
            elif params:
                set_clause = ", ".join(f"{field} = :{field}" for field in params)
                db.execute(
                    text(f"""
                        UPDATE student_profiles SET {set_clause}, updated_at = CURRENT_TIMESTAMP
                        WHERE profile_id = :profile_id
                    """),
                    {**params, "profile_id": profile_id}
                )

            if provided.get("skills") is not None:
                _replace_skills(db, profile_id, provided["skills"])

        return _load_profile(db, user["user_id"])


# ============================================================
# WORK EXPERIENCE
# ============================================================

def _get_owned_experience(db, experience_id: int, profile_id: int) -> dict:
    row = fetch_one(
        db,
        "SELECT experience_id, profile_id FROM work_experiences WHERE experience_id = :id",
        {"id": experience_id}
    )
    if not row:
        raise NotFoundError("Experience not found")
    if row["profile_id"] != profile_id:
        raise AuthorizationError()
    return row


def _experience_params(data: ExperienceCreate) -> dict:
    return {
        "company": data.company, "title": data.title, "location": data.location,
        "start_date": data.start_date, "end_date": None if data.current else data.end_date,
        "current": data.current, "description": data.description,
    }


@router.post("/experience", response_model=ExperienceResponse, status_code=201)
async def add_experience(data: ExperienceCreate, student: dict = Depends(require_student)):
    with get_db_session() as db:
        profile_id = _require_profile_id(db, student["user_id"])
        result = db.execute(
            text(f"""
                INSERT INTO work_experiences (profile_id, company, title, location, start_date,
                    end_date, is_current, description)
                VALUES (:profile_id, :company, :title, :location, :start_date,
                    :end_date, :current, :description)
                RETURNING {EXPERIENCE_COLUMNS}
            """),
            {**_experience_params(data), "profile_id": profile_id}
        )
        row = dict(result.mappings().one())

    return ExperienceResponse(**row)


@router.put("/experience", response_model=ExperienceResponse)
async def update_experience(data: ExperienceUpdate, student: dict = Depends(require_student)):
    with get_db_session() as db:
        profile_id = _require_profile_id(db, student["user_id"])
        _get_owned_experience(db, data.experience_id, profile_id)
        result = db.execute(
            text(f"""
                UPDATE work_experiences SET company = :company, title = :title, location = :location,
                    start_date = :start_date, end_date = :end_date, is_current = :current,
                    description = :description
                WHERE experience_id = :experience_id
                RETURNING {EXPERIENCE_COLUMNS}
            """),
            {**_experience_params(data), "experience_id": data.experience_id}
        )
        row = dict(result.mappings().one())

    return ExperienceResponse(**row)


@router.delete("/experience", response_model=MessageResponse)
async def delete_experience(
    id: int = Query(..., description="experience_id to delete"),
    student: dict = Depends(require_student)
):
    with get_db_session() as db:
        profile_id = _require_profile_id(db, student["user_id"])
        _get_owned_experience(db, id, profile_id)
        db.execute(text("DELETE FROM work_experiences WHERE experience_id = :id"), {"id": id})

    return MessageResponse(message="Experience deleted")


# ============================================================
# PROJECTS
# ============================================================

@router.post("/projects", response_model=ProjectResponse, status_code=201)
async def add_project(data: ProjectCreate, student: dict = Depends(require_student)):
    with get_db_session() as db:
        profile_id = _require_profile_id(db, student["user_id"])
        result = db.execute(
            text(f"""
                INSERT INTO projects (profile_id, name, description, url, technologies)
                VALUES (:profile_id, :name, :description, :url, :technologies)
                RETURNING {PROJECT_COLUMNS}
            """),
            {
                "profile_id": profile_id, "name": data.name, "description": data.description,
                "url": data.url, "technologies": json.dumps(data.technologies)
            }
        )
        row = dict(result.mappings().one())

    return _project_from_row(row)


@router.put("/projects", response_model=ProjectResponse)
async def update_project(data: ProjectUpdate, student: dict = Depends(require_student)):
    with get_db_session() as db:
        profile_id = _require_profile_id(db, student["user_id"])
        project = fetch_one(
            db, "SELECT profile_id FROM projects WHERE project_id = :id", {"id": data.project_id}
        )
        if not project:
            raise NotFoundError("Project not found")
        if project["profile_id"] != profile_id:
            raise AuthorizationError()

        result = db.execute(
            text(f"""
                UPDATE projects SET name = :name, description = :description, url = :url,
                    technologies = :technologies
                WHERE project_id = :project_id
                RETURNING {PROJECT_COLUMNS}
            """),
            {
                "project_id": data.project_id, "name": data.name, "description": data.description,
                "url": data.url, "technologies": json.dumps(data.technologies)
            }
        )
        row = dict(result.mappings().one())

    return _project_from_row(row)
