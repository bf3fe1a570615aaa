"""
Authentication Routes

POST /auth/register - Register new user
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from careerhub.db.postgres import get_db_session, fetch_one
from careerhub.core.auth import hash_password, verify_password, create_access_token, get_current_user
from careerhub.core.exceptions import AuthorizationError, ValidationError
from careerhub.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, UserResponse, UserRole, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new student or employer account.

    Employers create or join a company afterwards through /employer/company.
    Admin accounts are provisioned by the career center, not self-registered.
    """
    if request.role == UserRole.admin:
        raise ValidationError("Admin accounts cannot be self-registered")

    email = request.email.lower()
    try:
        with get_db_session() as db:
            if fetch_one(db, "SELECT user_id FROM users WHERE email = :email", {"email": email}):
                raise ValidationError("Email already registered")

            db.execute(
                text("""
                    INSERT INTO users (email, name, password_hash, role)
                    VALUES (:email, :name, :password_hash, :role)
                """),
                {
                    "email": email,
                    "name": request.name.strip(),
                    "password_hash": hash_password(request.password),
                    "role": request.role.value
                }
            )
    except IntegrityError:
        # Concurrent registration with the same email
        raise ValidationError("Email already registered")

    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        user = fetch_one(
            db,
            "SELECT user_id, password_hash, role, is_active FROM users WHERE email = :email",
            {"email": request.email.lower()}
        )

    if not user or not user["is_active"] or not verify_password(request.password, user["password_hash"]):
        raise AuthorizationError("Invalid email or password")

    token = create_access_token(data={"sub": str(user["user_id"]), "role": user["role"]})

    return TokenResponse(access_token=token, user_id=user["user_id"], role=user["role"])


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    with get_db_session() as db:
        row = fetch_one(
            db,
            "SELECT user_id, email, name, role, company_id, created_at FROM users WHERE user_id = :id",
            {"id": user["user_id"]}
        )

    return UserResponse(**row)
