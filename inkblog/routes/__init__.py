from inkblog.routes.admin import router as admin_router
from inkblog.routes.blog import router as blog_router
from inkblog.routes.category import router as category_router
from inkblog.routes.file import router as file_router
from inkblog.routes.tag import router as tag_router
from inkblog.routes.topic import router as topic_router
from inkblog.routes.user import router as user_router

__all__ = [
    "admin_router",
    "blog_router",
    "category_router",
    "file_router",
    "tag_router",
    "topic_router",
    "user_router",
]
