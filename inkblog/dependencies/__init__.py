# inkblog/dependencies/__init__.py

from inkblog.dependencies.dependencies import (
    AdminServiceDep,
    BlogServiceDep,
    CacheDep,
    CategoryServiceDep,
    CurrentUserDep,
    DatabaseDep,
    FileServiceDep,
    SearchDep,
    TagServiceDep,
    TopicServiceDep,
    UserServiceDep,
    ViewCountFlusherDep,
    get_cache_manager,
    get_current_user,
    get_database,
    get_search_client,
)

__all__ = [
    "AdminServiceDep",
    "BlogServiceDep",
    "CacheDep",
    "CategoryServiceDep",
    "CurrentUserDep",
    "DatabaseDep",
    "FileServiceDep",
    "SearchDep",
    "TagServiceDep",
    "TopicServiceDep",
    "UserServiceDep",
    "ViewCountFlusherDep",
    "get_cache_manager",
    "get_current_user",
    "get_database",
    "get_search_client",
]
