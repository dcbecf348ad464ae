"""
Cache key construction.

A key is the operation name plus its arguments, canonicalized so that
structurally equal arguments produce equal keys:

    build_key("full_name", (["a", "b"],)) == build_key("full_name", (["a", "b"],))
    build_key("full_name", (["a"],)) != build_key("full_name", (("a",),))

Attribute reads (presenter.name) use args=None, which keeps them apart
from zero-argument calls (presenter.name()).
"""
import dataclasses
from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple

from pydantic import BaseModel


class CacheKey(NamedTuple):
    """Immutable identity of a cacheable call."""
    operation: str
    args: Optional[Tuple[Any, ...]]
    kwargs: Tuple[Tuple[str, Any], ...]

    @property
    def is_attribute_read(self) -> bool:
        return self.args is None


def build_key(
    operation_name: str,
    args: Optional[Sequence[Any]] = None,
    kwargs: Optional[Dict[str, Any]] = None,
) -> CacheKey:
    """
    Build a cache key from operation identity and arguments.

    Args:
        operation_name: Name of the operation
        args: Positional arguments, or None for an attribute read
        kwargs: Keyword arguments (order-insensitive)

    Returns:
        A CacheKey comparing equal for value-equal arguments
    """
    canonical_args = None if args is None else tuple(_normalize(arg) for arg in args)
    canonical_kwargs = tuple(
        (name, _normalize(value)) for name, value in sorted((kwargs or {}).items())
    )
    return CacheKey(operation_name, canonical_args, canonical_kwargs)


def _normalize(obj: Any) -> Any:
    """Normalize an argument into a hashable, value-comparable form."""
    if isinstance(obj, (str, bytes, int, float, complex, bool, type(None))):
        return obj
    elif isinstance(obj, list):
        return ("list", tuple(_normalize(item) for item in obj))
    elif isinstance(obj, tuple):
        return ("tuple", tuple(_normalize(item) for item in obj))
    elif isinstance(obj, (set, frozenset)):
        return ("set", frozenset(_normalize(item) for item in obj))
    elif isinstance(obj, dict):
        items = [(_normalize(k), _normalize(v)) for k, v in obj.items()]
        try:
            return ("dict", frozenset(items))
        except TypeError:
            # Unhashable values: fall back to a stable ordering of the keys
            return ("dict", tuple(sorted(items, key=lambda item: repr(item[0]))))
    elif isinstance(obj, BaseModel):
        return (type(obj), _normalize(obj.model_dump()))
    elif _is_unhashable_dataclass(obj):
        return (type(obj), tuple(
            _normalize(getattr(obj, field.name))
            for field in dataclasses.fields(obj) if field.compare
        ))
    return obj


def _is_unhashable_dataclass(obj: Any) -> bool:
    # eq=True without frozen=True sets __hash__ to None
    return (
        dataclasses.is_dataclass(obj)
        and not isinstance(obj, type)
        and type(obj).__hash__ is None
    )
