"""Core app configuration, database, security and blob storage."""

from bugtracker.core.config import get_settings, settings
from bugtracker.core.database import get_db
from bugtracker.core.storage import get_blob_store

__all__ = ["get_settings", "settings", "get_db", "get_blob_store"]
