"""Exceptions raised by caching presenters."""
from typing import Optional


class PresenterError(Exception):
    """Base class for presenter errors."""
    pass


class NoSuchOperation(PresenterError, AttributeError):
    """
    Raised when an operation is defined neither on the presenter nor on
    its delegate.

    Subclasses AttributeError so that hasattr() and getattr() with a
    default keep working on presenters.
    """

    def __init__(self, operation: str, delegate_type: Optional[str] = None):
        self.operation = operation
        self.delegate_type = delegate_type
        if delegate_type:
            message = f"Neither the presenter nor {delegate_type} defines {operation!r}"
        else:
            message = f"Presenter does not define {operation!r}"
        super().__init__(message)


class OperationAttributeError(PresenterError, RuntimeError):
    """
    Raised when a presenter-defined property raises AttributeError.

    The original error is chained as __cause__.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Presenter property {operation!r} raised AttributeError")


class PresenterNotFound(PresenterError, LookupError):
    """Raised by strict present() when no presenter is registered for a type."""
    pass
