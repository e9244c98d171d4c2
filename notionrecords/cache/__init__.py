"""Response caching."""

from .manager import ResponseCache, create_cache

__all__ = ["ResponseCache", "create_cache"]
