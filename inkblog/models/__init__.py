"""Database models for the application."""

from inkblog.models.blog import BlogDB
from inkblog.models.file import FileDB
from inkblog.models.taxonomy import BlogTagDB, CategoryDB, TagDB, TopicDB
from inkblog.models.user import ADMIN_ROLES, Role, UserDB

__all__ = [
    "ADMIN_ROLES",
    "BlogDB",
    "BlogTagDB",
    "CategoryDB",
    "FileDB",
    "Role",
    "TagDB",
    "TopicDB",
    "UserDB",
]
