"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from careerhub.api.routes.auth_routes import router as auth_router
from careerhub.api.routes.job_routes import router as job_router
from careerhub.api.routes.application_routes import router as application_router
from careerhub.api.routes.employer_routes import router as employer_router
from careerhub.api.routes.interview_routes import router as interview_router
from careerhub.api.routes.review_routes import router as review_router
from careerhub.api.routes.company_routes import router as company_router
from careerhub.api.routes.admin_routes import router as admin_router
from careerhub.api.routes.profile_routes import router as profile_router
from careerhub.api.routes.upload_routes import router as upload_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(employer_router)
api_router.include_router(interview_router)
api_router.include_router(review_router)
api_router.include_router(company_router)
api_router.include_router(admin_router)
api_router.include_router(profile_router)
api_router.include_router(upload_router)
