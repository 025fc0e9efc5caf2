from inkblog.repositories.blog import BlogRepository
from inkblog.repositories.category import CategoryRepository
from inkblog.repositories.file import FileRepository
from inkblog.repositories.tag import TagRepository
from inkblog.repositories.topic import TopicRepository
from inkblog.repositories.user import UserRepository

__all__ = [
    "BlogRepository",
    "CategoryRepository",
    "FileRepository",
    "TagRepository",
    "TopicRepository",
    "UserRepository",
]
