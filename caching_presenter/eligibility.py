"""
Eligibility rules deciding whether a presenter call may be cached.

The decision only looks at the operation name and whether the call
carries a callback; it never inspects the delegate.
"""
from enum import Enum

from .constants import MUTATOR_SUFFIX


class Verdict(Enum):
    """Outcome of classifying a single call."""
    CACHEABLE = "cacheable"
    BYPASS_MUTATOR = "bypass_mutator"
    BYPASS_CALLBACK = "bypass_callback"

    @property
    def cacheable(self) -> bool:
        return self is Verdict.CACHEABLE


def is_mutator(operation_name: str) -> bool:
    """Return True if the name carries the trailing assignment marker."""
    return operation_name.endswith(MUTATOR_SUFFIX)


def mutator_name(attribute: str) -> str:
    """Operation name used for assigning to an attribute."""
    return attribute + MUTATOR_SUFFIX


def attribute_name(operation_name: str) -> str:
    """Attribute assigned by a mutator operation ("size=" -> "size")."""
    if is_mutator(operation_name):
        return operation_name[:-len(MUTATOR_SUFFIX)]
    return operation_name


def classify(operation_name: str, has_callback: bool) -> Verdict:
    """
    Classify a call.

    Args:
        operation_name: Name of the operation being invoked
        has_callback: Whether the call carries a callback argument

    Returns:
        BYPASS_MUTATOR for names ending with the assignment marker,
        BYPASS_CALLBACK for calls with a callback, CACHEABLE otherwise
    """
    if is_mutator(operation_name):
        return Verdict.BYPASS_MUTATOR
    if has_callback:
        return Verdict.BYPASS_CALLBACK
    return Verdict.CACHEABLE
