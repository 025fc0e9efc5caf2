from inkblog.services.admin import AdminService
from inkblog.services.blog import BlogService
from inkblog.services.category import CategoryService
from inkblog.services.file import FileService
from inkblog.services.scheduler import ViewCountFlusher, ViewCountScheduler
from inkblog.services.storage import LocalFileStorage
from inkblog.services.tag import TagService
from inkblog.services.topic import TopicService
from inkblog.services.user import UserService

__all__ = [
    "AdminService",
    "BlogService",
    "CategoryService",
    "FileService",
    "LocalFileStorage",
    "TagService",
    "TopicService",
    "UserService",
    "ViewCountFlusher",
    "ViewCountScheduler",
]
