"""Database models."""

from adminkit.models.base import Base
from adminkit.models.import_ import Import, FailedImportRow
from adminkit.models.lead import Lead, LeadStatus, DataSource
from adminkit.models.user import User, ApiKey
from adminkit.models.database import async_engine, async_session_maker, init_db, close_db

__all__ = [
    "Base",
    "Import",
    "FailedImportRow",
    "Lead",
    "LeadStatus",
    "DataSource",
    "User",
    "ApiKey",
    "async_engine",
    "async_session_maker",
    "init_db",
    "close_db",
]
