"""
CareerHub - Campus Job Board & Interview Platform
Connects students, employers and career-center staff.

Architecture:
- PostgreSQL: Structured data (users, companies, jobs, applications, interviews, reviews)
- MongoDB: Unstructured AI outputs (interview analysis archive)
- External providers: Daily.co video rooms, Whisper transcription,
  LLM interview analysis, Supabase document storage
"""

__version__ = "1.0.0"
