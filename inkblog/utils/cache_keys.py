"""
Cache key builders for the application.

Every cache key the services read or write is produced here, so the read
path and the invalidation path of an entity always agree on its key.
CacheManager adds the global prefix on top of these.
"""

from dataclasses import dataclass

from inkblog.schemas.blog import BlogPageQuery

HOT_BLOG_KEY = "hot-blog"
LATEST_BLOG_KEY = "latest-blog"
RECOMMEND_BLOG_KEY = "recommend-blog"
DRAFT_MAP_KEY = "save-blog-map"
WEBSITE_CONFIG_KEY = "website-config"

# Braces keep the live, draining and lock keys in one Redis cluster slot,
# which RENAME requires.
VIEW_COUNT_MAP_KEY = "{eye-count-map}"
VIEW_COUNT_DRAINING_KEY = "{eye-count-map}:draining"
VIEW_COUNT_LOCK_KEY = "{eye-count-map}:lock"

PAGE_KEY_PREFIX = "page:"
PAGE_KEY_PATTERN = f"{PAGE_KEY_PREFIX}*"


def blog_key(blog_id: int) -> str:
    """Detail entry (or absent marker) for one post."""
    return f"blog:{blog_id}"


def page_key(query: BlogPageQuery) -> str:
    """Listing page entry: ``page:{page}_{sort}_{categoryId}``."""
    return f"{PAGE_KEY_PREFIX}{query.page}_{query.sort.value}_{query.cid}"


def user_key(username: str) -> str:
    return f"user:{username}"


def token_key(username: str) -> str:
    return f"token:{username}"


def email_code_key(username: str) -> str:
    return f"email-code:{username}"


def view_count_field(blog_id: int) -> str:
    return str(blog_id)


def draft_field(user_id: int) -> str:
    return str(user_id)


@dataclass(frozen=True)
class TaxonomyKeys:
    """
    Key set for one taxonomy kind.

    ``map_key`` and ``random_key`` are only present for kinds that support
    single-item lookups or random sampling; ``extra_keys`` are dropped
    together with the rest on invalidation.
    """

    kind: str
    list_key: str
    map_key: str | None = None
    random_key: str | None = None
    extra_keys: tuple[str, ...] = ()

    def all_keys(self) -> list[str]:
        keys = [self.list_key, *self.extra_keys]
        if self.map_key:
            keys.append(self.map_key)
        if self.random_key:
            keys.append(self.random_key)
        return keys


TOPIC_FIRST_PAGE_KEY = "topic-first-page"

CATEGORY_KEYS = TaxonomyKeys(kind="category", list_key="category-list")
TAG_KEYS = TaxonomyKeys(
    kind="tag",
    list_key="tag-list",
    map_key="tag-map",
    random_key="random-tag",
)
TOPIC_KEYS = TaxonomyKeys(
    kind="topic",
    list_key="topic-list",
    map_key="topic-map",
    extra_keys=(TOPIC_FIRST_PAGE_KEY,),
)
