"""Core database modules."""

from inkblog.db.database import Database, get_session

__all__ = ["Database", "get_session"]
