"""
CareerHub - Main Application

FastAPI backend with:
- PostgreSQL for structured data (SQLite for tests)
- MongoDB for archived AI analysis output
- Daily.co video rooms, Whisper transcription, LLM interview feedback
- Supabase Storage for uploaded documents
- JWT authentication

Run: uvicorn careerhub.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from careerhub import __version__
from careerhub.api.routes import api_router
from careerhub.core.config import get_settings
from careerhub.core.error_handler import careerhub_exception_handler, unhandled_exception_handler
from careerhub.core.exceptions import CareerHubError
from careerhub.core.logging_config import setup_logging
from careerhub.db.mongodb import init_mongo_indexes, check_mongo_connection
from careerhub.db.postgres import engine, check_database_connection
from careerhub.db.schema import init_db

settings = get_settings()

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create missing tables and MongoDB indexes
    init_db(engine)
    logger.info("Database tables ready")
    try:
        init_mongo_indexes()
    except PyMongoError as e:
        # The archive is optional; the API works without MongoDB
        logger.warning("MongoDB index initialization failed: %s", e)
    yield
    # Shutdown
    engine.dispose()


# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="CareerHub",
    description="""
    Job board and applicant tracking for students, employers and the career center.

    ## Features
    - **Jobs**: Post, search and manage job listings
    - **Applications**: One application per job, with required documents
    - **Interviews**: Slot proposals, video rooms and AI communication feedback
    - **Reviews**: Students rate employers; ratings and ghosting rates per company
    - **Admin**: Career-center analytics and internal employer reviews
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(CareerHubError, careerhub_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "CareerHub", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if check_database_connection() else "disconnected",
        "mongodb": "connected" if check_mongo_connection() else "disconnected"
    }
