"""
Database module - relational store and MongoDB document archive.
"""
from careerhub.db.postgres import get_db_session, execute_raw_sql, check_database_connection
from careerhub.db.mongodb import get_mongo_db, check_mongo_connection

__all__ = [
    "get_db_session",
    "execute_raw_sql",
    "check_database_connection",
    "get_mongo_db",
    "check_mongo_connection"
]
