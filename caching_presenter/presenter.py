"""
Caching presenters.

A presenter wraps a domain object (its delegate) and behaves like it,
memoizing the results of read operations for the presenter's lifetime.
Operations defined on a presenter subclass take priority over the
delegate's and are cached under the same rules:

    class UserPresenter(CachingPresenter):
        def full_name(self):
            return f"{self.first_name} {self.last_name}"

    presenter = UserPresenter(user)
    presenter.full_name()      # computed once
    presenter.email            # forwarded to user.email, cached
    presenter.email = "x@y"    # mutator "email=", never cached
    presenter.each(block=fn)   # carries a callback, never cached
"""
import collections.abc
import functools
import inspect
import operator
import threading
import types
from typing import Any, Callable, Dict, FrozenSet, Optional, Sequence, Tuple

import structlog

from .cache import MISSING, CacheStore, build_key
from .config import get_settings, log_error
from .constants import ITEM_ASSIGNMENT
from .eligibility import attribute_name, classify, is_mutator, mutator_name
from .exceptions import NoSuchOperation, OperationAttributeError

logger = structlog.get_logger(__name__)

# Kinds of presenter-defined operations in the dispatch table
METHOD = "method"
PROPERTY = "property"

# Attributes held by the presenter itself; every other name belongs to the delegate
PRESENTER_ATTRIBUTES = frozenset({
    "_delegate", "_cache", "_callback_keyword", "_materialize_generators", "_options",
})


class _BoundOperation:
    """A callable operation bound to a presenter; calls go through the dispatcher."""

    __slots__ = ("_presenter", "_name", "_target")

    def __init__(self, presenter: "CachingPresenter", name: str, target: Callable):
        self._presenter = presenter
        self._name = name
        self._target = target

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        callback = kwargs.pop(self._presenter._callback_keyword, None)
        return self.call(args, kwargs, callback)

    def call(self, args: Sequence[Any], kwargs: Dict[str, Any], callback: Optional[Callable] = None) -> Any:
        return self._presenter._dispatch(self._name, self._target, tuple(args), kwargs, callback)

    def __getattr__(self, name: str) -> Any:
        if name in _BoundOperation.__slots__:
            raise AttributeError(name)
        return getattr(self._target, name)

    def __repr__(self) -> str:
        return f"<operation {self._name!r} of {self._presenter!r}>"


class _CachedOperation:
    """Descriptor for a presenter-defined method."""

    def __init__(self, name: str, func: Callable):
        self.name = name
        self.func = func
        self.__doc__ = func.__doc__
        self.__wrapped__ = func

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self.func
        return _BoundOperation(instance, self.name, self.func.__get__(instance, owner))


class _CachedProperty:
    """Descriptor for a presenter-defined property."""

    def __init__(self, name: str, prop: property):
        self.name = name
        self.prop = prop
        self.__doc__ = prop.__doc__

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return instance._dispatch(self.name, functools.partial(self._read, instance), None, {}, None)

    def __set__(self, instance: Any, value: Any) -> None:
        instance._assign(self.name, value)

    def _read(self, instance: Any) -> Any:
        if self.prop.fget is None:
            raise NoSuchOperation(self.name)
        try:
            return self.prop.fget(instance)
        except AttributeError as exc:
            # An AttributeError escaping __get__ makes Python retry via __getattr__
            raise OperationAttributeError(self.name) from exc


def _is_data_member(delegate: Any, name: str) -> Optional[bool]:
    """
    Decide whether a delegate member is read as a value or called.

    Returns True for properties and plain values, False for callables
    and None when the member is only reachable dynamically.
    """
    try:
        static = inspect.getattr_static(delegate, name)
    except AttributeError:
        return None

    if isinstance(static, (property, functools.cached_property,
                           types.MemberDescriptorType, types.GetSetDescriptorType)):
        return True
    if isinstance(static, (staticmethod, classmethod)) or callable(static):
        return False
    if hasattr(type(static), "__get__"):
        return None
    return True


class CachingPresenter:
    """
    Decorating proxy memoizing read operations of its delegate.

    The store is created empty with the presenter and lives exactly as
    long as it does. A presenter is single-threaded unless constructed
    with thread_safe=True.
    """

    # name -> METHOD | PROPERTY, built once per class
    _own_operations: Dict[str, str] = {}
    # name -> property setter, for "name=" operations defined on the presenter
    _own_setters: Dict[str, Callable] = {}
    # Options set up by presents(); read-only, never forwarded
    _option_names: FrozenSet[str] = frozenset()

    def __init__(self, delegate: Any, thread_safe: Optional[bool] = None):
        """
        Wrap a delegate.

        Args:
            delegate: Domain object to present; never mutated by wrapping
            thread_safe: Guard the store with an RLock, defaults to settings
        """
        settings = get_settings()
        if thread_safe is None:
            thread_safe = settings.thread_safe

        object.__setattr__(self, "_delegate", delegate)
        object.__setattr__(self, "_cache", CacheStore(lock=threading.RLock() if thread_safe else None))
        object.__setattr__(self, "_callback_keyword", settings.callback_keyword)
        object.__setattr__(self, "_materialize_generators", settings.materialize_generators)

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        operations = dict(cls._own_operations)
        setters = dict(cls._own_setters)

        for name, member in list(vars(cls).items()):
            if name.startswith("_"):
                continue
            if isinstance(member, property):
                setattr(cls, name, _CachedProperty(name, member))
                operations[name] = PROPERTY
                if member.fset is not None:
                    setters[name] = member.fset
                else:
                    setters.pop(name, None)
            elif isinstance(member, types.FunctionType) and not inspect.iscoroutinefunction(member):
                setattr(cls, name, _CachedOperation(name, member))
                operations[name] = METHOD
                setters.pop(name, None)

        cls._own_operations = operations
        cls._own_setters = setters

    # Dispatcher

    def _dispatch(
        self,
        operation: str,
        execute: Callable,
        args: Optional[Tuple[Any, ...]],
        kwargs: Dict[str, Any],
        callback: Optional[Callable],
    ) -> Any:
        """
        Run one operation under the caching rules.

        Args:
            operation: Operation name
            execute: Presenter-defined or delegated implementation
            args: Positional arguments, or None for an attribute read
            kwargs: Keyword arguments
            callback: Callback passed with the call, if any

        Returns:
            The stored result on a hit, otherwise the executed result
        """
        verdict = classify(operation, callback is not None)
        if not verdict.cacheable:
            logger.debug("cache_bypass", presenter=type(self).__name__,
                         operation=operation, verdict=verdict.value)
            return self._execute(operation, execute, args, kwargs, callback)

        key = build_key(operation, args, kwargs)
        cache = self._cache
        with cache.locked():
            result = cache.lookup(key)
            if result is not MISSING:
                logger.debug("cache_hit", presenter=type(self).__name__, operation=operation)
                return result

            logger.debug("cache_miss", presenter=type(self).__name__, operation=operation)
            result = self._execute(operation, execute, args, kwargs, None)
            if self._materialize_generators and isinstance(result, collections.abc.Iterator):
                result = list(result)
            cache.store(key, result)
            return result

    def _execute(
        self,
        operation: str,
        execute: Callable,
        args: Optional[Tuple[Any, ...]],
        kwargs: Dict[str, Any],
        callback: Optional[Callable],
    ) -> Any:
        if callback is not None:
            kwargs = dict(kwargs, **{self._callback_keyword: callback})
        try:
            return execute(*(args or ()), **kwargs)
        except Exception as error:
            log_error(logger, error, {"presenter": type(self).__name__, "operation": operation})
            raise

    def _delegated(self, name: str) -> Any:
        delegate = self._delegate
        data_member = _is_data_member(delegate, name)
        if data_member:
            return self._dispatch(name, functools.partial(getattr, delegate, name), None, {}, None)

        if data_member is None:
            # Descriptors and __getattr__ members: a stored read wins before getattr runs
            read_key = build_key(name)
            cache = self._cache
            with cache.locked():
                if read_key in cache:
                    logger.debug("cache_hit", presenter=type(self).__name__, operation=name)
                    return cache.lookup(read_key)

        try:
            member = getattr(delegate, name)
        except AttributeError:
            raise NoSuchOperation(name, type(delegate).__name__) from None

        if callable(member):
            return _BoundOperation(self, name, member)
        return self._dispatch(name, lambda: member, None, {}, None)

    def _assign(self, name: str, value: Any) -> None:
        setter = type(self)._own_setters.get(name)
        if setter is not None:
            execute = functools.partial(setter, self)
        else:
            execute = functools.partial(setattr, self._delegate, name)
        self._dispatch(mutator_name(name), execute, (value,), {}, None)

    def _invoke(
        self,
        operation: str,
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
        callback: Optional[Callable],
    ) -> Any:
        if operation == ITEM_ASSIGNMENT:
            return self._dispatch(operation, functools.partial(operator.setitem, self._delegate),
                                  args, kwargs, callback)

        if is_mutator(operation):
            if len(args) != 1 or kwargs or callback is not None:
                raise TypeError(f"{operation!r} takes exactly one value")
            return self._assign(attribute_name(operation), args[0])

        if operation.startswith("__") and not self._defines(operation):
            return self._dispatch(operation, self._delegate_member(operation), args, kwargs, callback)

        if (callback is not None and not operation.startswith("__")
                and type(self)._own_operations.get(operation) != METHOD):
            return self._dispatch(operation, self._callable_member(operation), args, kwargs, callback)

        member = getattr(self, operation)
        if isinstance(member, _BoundOperation):
            return member.call(args, kwargs, callback)
        if not args and not kwargs and callback is None and not operation.startswith("__"):
            return member

        if callback is not None:
            kwargs = dict(kwargs, **{self._callback_keyword: callback})
        return member(*args, **kwargs)

    def _defines(self, operation: str) -> bool:
        return any(operation in vars(klass) for klass in type(self).__mro__ if klass is not object)

    def _delegate_member(self, operation: str) -> Any:
        try:
            return getattr(self._delegate, operation)
        except AttributeError:
            raise NoSuchOperation(operation, type(self._delegate).__name__) from None

    def _callable_member(self, operation: str) -> Callable:
        """Resolve a callback call without reading any stored attribute."""
        is_attribute = (
            type(self)._own_operations.get(operation) == PROPERTY
            or operation in type(self)._option_names
            or _is_data_member(self._delegate, operation)
        )
        if not is_attribute:
            member = self._delegate_member(operation)
            if callable(member):
                return member
        raise TypeError(f"{operation!r} is an attribute and takes no callback")

    # Attribute protocol

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails: never an own operation
        if name.startswith("__") or name in PRESENTER_ATTRIBUTES:
            raise NoSuchOperation(name)
        return self._delegated(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in PRESENTER_ATTRIBUTES:
            object.__setattr__(self, name, value)
            return
        if name in type(self)._option_names:
            raise AttributeError(f"Presenter option {name!r} is read-only")
        self._assign(name, value)

    def __dir__(self):
        return sorted(set(object.__dir__(self)) | set(dir(self._delegate)))

    # Container and conversion protocols

    def __getitem__(self, key: Any) -> Any:
        return self._dispatch("__getitem__", functools.partial(operator.getitem, self._delegate),
                              (key,), {}, None)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._dispatch(ITEM_ASSIGNMENT, functools.partial(operator.setitem, self._delegate),
                       (key, value), {}, None)

    def __contains__(self, item: Any) -> bool:
        return self._dispatch("__contains__", functools.partial(operator.contains, self._delegate),
                              (item,), {}, None)

    def __len__(self) -> int:
        return self._dispatch("__len__", functools.partial(len, self._delegate), (), {}, None)

    def __iter__(self):
        return iter(self._dispatch("__iter__", functools.partial(list, self._delegate), (), {}, None))

    def __bool__(self) -> bool:
        return self._dispatch("__bool__", functools.partial(bool, self._delegate), (), {}, None)

    def __str__(self) -> str:
        return self._dispatch("__str__", functools.partial(str, self._delegate), (), {}, None)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, CachingPresenter):
            other = other._delegate
        return self._delegate == other

    def __hash__(self) -> int:
        return hash(self._delegate)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} of {self._delegate!r}>"


def make_proxy(delegate: Any, thread_safe: Optional[bool] = None) -> CachingPresenter:
    """Wrap a domain object in a plain caching presenter."""
    return CachingPresenter(delegate, thread_safe=thread_safe)


def invoke(
    presenter: CachingPresenter,
    operation_name: str,
    args: Sequence[Any] = (),
    callback: Optional[Callable] = None,
    **kwargs: Any,
) -> Any:
    """
    Invoke an operation on a presenter by name.

    invoke(p, "size") is the same cached read as p.size when size is an
    attribute, and the same cached call as p.size() when it is a method.
    invoke(p, "size=", [43]) assigns through the presenter.

    Args:
        presenter: Presenter to invoke on
        operation_name: Operation name, "name=" for assignments
        args: Positional arguments
        callback: Callback to pass with the call; disables caching
        **kwargs: Keyword arguments

    Raises:
        NoSuchOperation: If neither the presenter nor its delegate defines it
    """
    return presenter._invoke(operation_name, tuple(args), kwargs, callback)


def cache_stats(presenter: CachingPresenter) -> Dict[str, Any]:
    """Get statistics about a presenter's store."""
    return presenter._cache.get_stats()
