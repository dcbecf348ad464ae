"""
Caching presenters.

A presenter wraps a domain object, behaves like it, and memoizes the
results of its read operations for as long as the presenter lives.
Mutators (operations named "name=") and calls carrying a callback are
never cached, and failures are never stored.
"""

from .eligibility import Verdict, classify, is_mutator
from .exceptions import (
    NoSuchOperation,
    OperationAttributeError,
    PresenterError,
    PresenterNotFound,
)
from .presenter import CachingPresenter, cache_stats, invoke, make_proxy
from .presents import present, present_collection, presents

__all__ = [
    'CachingPresenter',
    'NoSuchOperation',
    'OperationAttributeError',
    'PresenterError',
    'PresenterNotFound',
    'Verdict',
    'cache_stats',
    'classify',
    'invoke',
    'is_mutator',
    'make_proxy',
    'present',
    'present_collection',
    'presents',
]
