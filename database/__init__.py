"""
Database layer — queue table model, async sessions, insert gateway.

Backends: PostgreSQL / MySQL / SQLite via SQLAlchemy async.

Quick start:
  from database import init_db, get_session, SqlInsertGateway
  await init_db()
  gateway = SqlInsertGateway()
"""
from database.models import Base, QueueMessageRow
from database.session import (
    QueueDatabase, get_database, get_engine, get_session, init_db, close_db,
)
from database.gateway import InsertGateway, SqlInsertGateway, build_insert

__all__ = [
    # ORM models
    "Base", "QueueMessageRow",
    # Session management
    "QueueDatabase", "get_database", "get_engine", "get_session", "init_db", "close_db",
    # Insert gateway
    "InsertGateway", "SqlInsertGateway", "build_insert",
]
