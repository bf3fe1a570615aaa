"""
Schemas module - Request/Response schemas for API endpoints.

Everything lives in schemas.py; import from there:
    from careerhub.schemas.schemas import JobCreate, JobResponse
"""
