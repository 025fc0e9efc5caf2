from inkblog.configs.settings import (
    BlogCacheConfig,
    CacheConfig,
    LimiterConfig,
    RedisCacheConfig,
    pool_kwargs,
    settings,
)

__all__ = [
    "BlogCacheConfig",
    "CacheConfig",
    "LimiterConfig",
    "RedisCacheConfig",
    "pool_kwargs",
    "settings",
]
