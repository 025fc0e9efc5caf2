from inkblog.managers.blog_cache import BlogCache
from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.page_cache import PageCache
from inkblog.managers.rate_limiter import limiter, rate_limit_exceeded_handler
from inkblog.managers.taxonomy_cache import TaxonomyCache, TopicCache
from inkblog.managers.user_cache import UserCache
from inkblog.managers.view_counter import ViewCounter

__all__ = [
    "BlogCache",
    "CacheManager",
    "PageCache",
    "TaxonomyCache",
    "TopicCache",
    "UserCache",
    "ViewCounter",
    "limiter",
    "rate_limit_exceeded_handler",
]
