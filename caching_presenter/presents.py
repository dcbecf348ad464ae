"""
Declarative presenter setup and host-side helpers.

    @presents("user", accepts=["viewer"])
    class UserPresenter(CachingPresenter):
        def greeting(self):
            return f"Hello {self.first_name}, from {self.viewer}"

    presenter = present(user, viewer="admin")   # finds UserPresenter
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type

import structlog

from .constants import PRESENTER_CLASS_SUFFIX
from .exceptions import PresenterNotFound
from .presenter import CachingPresenter, make_proxy

logger = structlog.get_logger(__name__)

# Presenter class name -> presenter class
_registry: Dict[str, Type[CachingPresenter]] = {}


def _register(cls: Type[CachingPresenter]) -> None:
    """Register cls under its class name; a different class of that name is an error."""
    existing = _registry.get(cls.__name__)
    if existing is not None and existing is not cls:
        same_definition = (
            (existing.__module__, existing.__qualname__)
            == (cls.__module__, cls.__qualname__)
        )
        if not same_definition:
            raise ValueError(
                f"Presenter name {cls.__name__!r} is already registered by "
                f"{existing.__module__}.{existing.__qualname__}"
            )
        # Same module and qualname: a reloaded or re-executed definition
        logger.info("presenter_replaced", presenter=cls.__name__, module=cls.__module__)
    _registry[cls.__name__] = cls


def _option_property(name: str) -> property:
    def getter(self):
        return self._options[name]
    getter.__name__ = name
    return property(getter, doc=f"The {name!r} this presenter was built with.")


def presents(
    name: str,
    accepts: Sequence[str] = (),
    requires: Sequence[str] = (),
):
    """
    Class decorator naming the object a presenter presents.

    The decorated class is constructed with keywords only:
    Presenter(<name>=obj, <required>=..., <accepted>=...). The value of
    <name> becomes the delegate; every option is exposed as a read-only
    attribute that is never forwarded to the delegate.

    Args:
        name: Keyword carrying the presented object
        accepts: Optional keywords, defaulting to None
        requires: Mandatory keywords besides name
    """
    accepts = tuple(accepts)
    requires = tuple(requires)
    if not name.isidentifier() or name.startswith("_"):
        raise ValueError(f"Invalid presented name: {name!r}")

    def decorator(cls: Type[CachingPresenter]) -> Type[CachingPresenter]:
        if not (isinstance(cls, type) and issubclass(cls, CachingPresenter)):
            raise TypeError("presents() decorates CachingPresenter subclasses")

        mandatory = (name,) + requires
        allowed = set(mandatory) | set(accepts)

        def __init__(self, thread_safe: Optional[bool] = None, **options: Any):
            unknown = sorted(set(options) - allowed)
            if unknown:
                raise TypeError(f"{cls.__name__} got unexpected options: {', '.join(unknown)}")
            missing = [option for option in mandatory if option not in options]
            if missing:
                raise TypeError(f"{cls.__name__} missing required options: {', '.join(missing)}")

            for option in accepts:
                options.setdefault(option, None)
            CachingPresenter.__init__(self, options[name], thread_safe=thread_safe)
            object.__setattr__(self, "_options", options)

        __init__.__qualname__ = f"{cls.__qualname__}.__init__"
        cls.__init__ = __init__
        for option in allowed:
            setattr(cls, option, _option_property(option))

        cls._option_names = frozenset(allowed)
        cls.presents_name = name
        cls.presents_accepts = accepts
        cls.presents_requires = requires

        _register(cls)
        logger.debug("presenter_registered", presenter=cls.__name__, presents=name)
        return cls

    return decorator


def find_presenter(obj: Any) -> Optional[Type[CachingPresenter]]:
    """Find the registered <Class>Presenter for an object or its base classes."""
    for klass in type(obj).__mro__:
        presenter_class = _registry.get(klass.__name__ + PRESENTER_CLASS_SUFFIX)
        if presenter_class is not None:
            return presenter_class
    return None


def present(
    obj: Any,
    presenter_class: Optional[Type[CachingPresenter]] = None,
    strict: bool = False,
    **options: Any,
) -> CachingPresenter:
    """
    Wrap an object before handing it to presentation code.

    Args:
        obj: Domain object to present
        presenter_class: Presenter to use instead of the registered one
        strict: Raise PresenterNotFound instead of using a plain presenter
        **options: Extra options for a presents()-decorated class

    Returns:
        A presenter wrapping obj; obj itself if it already is one
    """
    if presenter_class is None:
        if isinstance(obj, CachingPresenter):
            return obj
        presenter_class = find_presenter(obj)

    if presenter_class is None:
        if strict:
            raise PresenterNotFound(
                f"No presenter registered for {type(obj).__name__}"
            )
        return make_proxy(obj, **options)

    presented = getattr(presenter_class, "presents_name", None)
    if presented is not None:
        return presenter_class(**{presented: obj}, **options)
    return presenter_class(obj, **options)


def present_collection(
    objs: Iterable[Any],
    presenter_class: Optional[Type[CachingPresenter]] = None,
    **options: Any,
) -> List[CachingPresenter]:
    """Present every object of a collection."""
    return [present(obj, presenter_class, **options) for obj in objs]


def registered_presenters() -> Dict[str, Type[CachingPresenter]]:
    """Get a copy of the presenter registry."""
    return dict(_registry)
