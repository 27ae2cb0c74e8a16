"""Lazy providers.

This module defines :class:`Provider`, the marker type a slot declares when it
wants a lazy handle instead of an eagerly resolved value, and
:class:`SlotProvider`, the object actually injected into such a slot when the
registry had no direct match at wiring time.
"""

from typing import TYPE_CHECKING, Any, Generic, TypeVar, get_origin

from .exceptions import ProviderNotFoundError

if TYPE_CHECKING:
    from .registry import Registry
    from .slots import InjectionSlot

T = TypeVar("T")


class Provider(Generic[T]):
    """Lazy handle to a dependency of type ``T``.

    Declare a constructor parameter, method parameter or field as
    ``Provider[T]`` to receive a provider; call :meth:`get` to look the
    dependency up.
    """

    def get(self) -> T:
        raise NotImplementedError

    def __call__(self) -> T:
        return self.get()


def is_provider_type(ann: Any) -> bool:
    """Return ``True`` if *ann* is ``Provider`` or a parameterised ``Provider[T]``."""
    if ann is Provider:
        return True
    origin = get_origin(ann)
    return isinstance(origin, type) and issubclass(origin, Provider)


class SlotProvider(Provider[T]):
    """A provider bound to one deferred injection slot.

    The lookup runs on every :meth:`get`, against the registry captured when
    the descriptor was built.

    Args:
        registry: The registry used for the deferred lookup.
        slot: The deferred slot sharing this provider's site.

    Raises:
        ProviderNotFoundError: From :meth:`get`, if no component matches.
    """

    __slots__ = ("_registry", "slot")

    def __init__(self, registry: "Registry", slot: "InjectionSlot") -> None:
        self._registry = registry
        self.slot = slot

    def get(self) -> T:
        value = self._registry.lookup(self.slot.required_type, self.slot.qualifiers)
        if value is None:
            raise ProviderNotFoundError(self.slot.required_type, self.slot.site)
        return value

    def __repr__(self) -> str:
        name = getattr(self.slot.required_type, "__name__", str(self.slot.required_type))
        return f"SlotProvider[{name}]({self.slot.site}.{self.slot.name})"
