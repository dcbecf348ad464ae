"""Result store and key helpers used by caching presenters."""

from .core import MISSING, CacheStore
from .keys import CacheKey, build_key

__all__ = [
    'MISSING',
    'CacheStore',
    'CacheKey',
    'build_key',
]
