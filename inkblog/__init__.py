"""inkblog backend: blog platform API with a cache-aside consistency layer."""

__version__ = "1.0.0"
