from inkblog.schemas.admin import AdminBlogFilter, AdminBlogItem, AdminListFilter, AdminTaxonomyItem
from inkblog.schemas.auth import Token, TokenData
from inkblog.schemas.blog import (
    ArchiveBlog,
    ArchiveQuery,
    BlogDetail,
    BlogEditInfo,
    BlogPageQuery,
    BlogRequest,
    BlogSummary,
    DraftContent,
    HotBlog,
    RecommendBlog,
    RecommendRequest,
    SearchHit,
    SimpleBlog,
    SortMode,
)
from inkblog.schemas.cache import CacheHealthResponse, CacheStatisticsData, FlushReport
from inkblog.schemas.common import IdsRequest, MessageResponse, PageInfo, SimpleUser
from inkblog.schemas.file import (
    AdminFileItem,
    FileCheckRequest,
    FileCheckResponse,
    FileItem,
    FilePublicUpdate,
)
from inkblog.schemas.taxonomy import (
    CategoryItem,
    NameRequest,
    TagItem,
    TopicDetail,
    TopicItem,
    TopicRequest,
)
from inkblog.schemas.user import (
    LoginRequest,
    ProfileUpdate,
    RegisterCodeRequest,
    RegisterRequest,
    RoleUpdate,
    UserPublic,
    UserRecord,
    WebsiteConfig,
)

__all__ = [
    "AdminBlogFilter",
    "AdminBlogItem",
    "AdminFileItem",
    "AdminListFilter",
    "AdminTaxonomyItem",
    "ArchiveBlog",
    "ArchiveQuery",
    "BlogDetail",
    "BlogEditInfo",
    "BlogPageQuery",
    "BlogRequest",
    "BlogSummary",
    "CacheHealthResponse",
    "CacheStatisticsData",
    "CategoryItem",
    "DraftContent",
    "FileCheckRequest",
    "FileCheckResponse",
    "FileItem",
    "FilePublicUpdate",
    "FlushReport",
    "HotBlog",
    "IdsRequest",
    "LoginRequest",
    "MessageResponse",
    "NameRequest",
    "PageInfo",
    "ProfileUpdate",
    "RecommendBlog",
    "RecommendRequest",
    "RegisterCodeRequest",
    "RegisterRequest",
    "RoleUpdate",
    "SearchHit",
    "SimpleBlog",
    "SimpleUser",
    "SortMode",
    "TagItem",
    "Token",
    "TokenData",
    "TopicDetail",
    "TopicItem",
    "TopicRequest",
    "UserPublic",
    "UserRecord",
    "WebsiteConfig",
]
