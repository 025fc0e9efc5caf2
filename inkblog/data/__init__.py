from inkblog.data.statistics import CacheStatistics

__all__ = ["CacheStatistics"]
