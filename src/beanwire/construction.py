"""Instance construction.

:func:`instantiate` builds the raw object through the ``@inject`` constructor
(or plain ``cls()``); :func:`create_result` then wires its fields and methods
and reports the outcome as a :class:`Creation`.
"""

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from .constants import CLEANUP_FLAG, LOGGER
from .exceptions import ComponentCreationError, QualifierIntegrityError
from .resolution import resolve_arguments, resolve_into

if TYPE_CHECKING:
    from .descriptor import ComponentDescriptor
    from .registry import Registry


@dataclass(frozen=True)
class Creation:
    """Outcome of one creation request.

    Exactly one of :attr:`instance` and :attr:`error` is set. A failed
    creation never carries a partially wired instance.
    """
    descriptor: "ComponentDescriptor"
    instance: Any = None
    error: Optional[ComponentCreationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.instance


def instantiate(descriptor: "ComponentDescriptor", registry: "Registry") -> Any:
    cls = descriptor.declaring_type
    site = descriptor.constructor
    if site is None:
        return cls()

    args, kwargs = resolve_arguments(descriptor.constructor_slots, descriptor.constructor_providers, registry)
    if site.name == "__init__":
        return cls(*args, **kwargs)
    instance = site.function(cls, *args, **kwargs)
    if instance is None:
        raise TypeError(f"Constructor {site} returned None")
    return instance


def create_result(descriptor: "ComponentDescriptor", registry: "Registry") -> Creation:
    """Construct and wire a new instance of *descriptor*.

    Failures while resolving or invoking the constructor, fields or methods
    are logged and returned as a failed :class:`Creation`. A
    :class:`~beanwire.exceptions.QualifierIntegrityError` is not a creation
    failure and propagates.
    """
    try:
        instance = instantiate(descriptor, registry)
        resolve_into(instance, descriptor, registry)
    except QualifierIntegrityError:
        raise
    except Exception as e:
        LOGGER.error("Failed to create component [name=%s]: %s", descriptor.name, e, exc_info=True)
        return Creation(descriptor, error=ComponentCreationError(descriptor.declaring_type, e))
    return Creation(descriptor, instance=instance)


def create(descriptor: "ComponentDescriptor", registry: "Registry") -> Any:
    """Like :func:`create_result`, returning the instance or ``None`` on failure."""
    return create_result(descriptor, registry).instance


def destroy(descriptor: "ComponentDescriptor", instance: Any) -> None:
    LOGGER.debug("Destroy component [name=%s]", descriptor.name)
    for _, m in inspect.getmembers(instance, predicate=inspect.ismethod):
        if not getattr(m, CLEANUP_FLAG, False):
            continue
        try:
            m()
        except Exception as e:
            LOGGER.warning(
                "Cleanup method %s.%s failed: %s",
                type(instance).__name__,
                getattr(m, "__name__", "<unknown>"),
                e,
            )
