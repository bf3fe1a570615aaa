#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the database, MongoDB and the analysis LLM are reachable.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from careerhub.db.postgres import check_database_connection
from careerhub.db.mongodb import check_mongo_connection
from careerhub.services.llm_client import get_interview_analyzer
from careerhub.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("CAREERHUB - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] Checking relational database...")
    url = settings.sqlalchemy_url
    print(f"    URL: {url.split('@')[-1] if '@' in url else url}")
    print("    Database: " + ("CONNECTED" if check_database_connection() else "FAILED"))

    print("\n[2] Checking MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    print("    MongoDB: " + ("CONNECTED" if check_mongo_connection() else "FAILED"))

    print("\n[3] Checking analysis LLM...")
    if settings.llm_api_key:
        print(f"    Base URL: {settings.llm_base_url}")
        print(f"    Model: {settings.llm_model}")
        ok = get_interview_analyzer().check_connection()
        print("    LLM: " + ("CONNECTED" if ok else "FAILED"))
    else:
        print("    LLM: API key not configured (skipped)")

    for name, value in (("Daily.co", settings.daily_api_key), ("OpenAI Whisper", settings.openai_api_key),
                        ("Supabase Storage", settings.supabase_key)):
        print(f"\n    {name}: {'key configured' if value else 'key NOT configured'}")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
