"""Component descriptors.

A :class:`ComponentDescriptor` is the metadata record for one registered
class: its injection slots (computed once by
:func:`beanwire.builder.build_descriptor` and immutable afterwards) and its
identity (name, qualifiers, scope), which stays mutable during bootstrap
through the fluent setters :meth:`~ComponentDescriptor.named`,
:meth:`~ComponentDescriptor.qualified` and :meth:`~ComponentDescriptor.scoped`.
"""

from types import MappingProxyType
from typing import TYPE_CHECKING, Any, FrozenSet, Iterable, Mapping, Optional, Set, Tuple

from .constants import LOGGER
from .decorators import Named, Qualifier
from .exceptions import QualifierIntegrityError
from .slots import ConstructorSite, InjectionSlot, MethodSite

if TYPE_CHECKING:
    from .providers import SlotProvider
    from .registry import BindingIndex

ProviderMap = Mapping[InjectionSlot, "SlotProvider"]

_EMPTY: ProviderMap = MappingProxyType({})


class ComponentDescriptor:
    """Metadata for one registered component.

    Attributes:
        declaring_type: The component class.
        exposed_types: Every type this component satisfies lookups for.
        constructor: The ``@inject`` constructor, or ``None`` for default
            construction.
        constructor_slots: Ordered parameter slots of :attr:`constructor`.
        constructor_providers: Providers of deferred constructor slots.
        field_slots: Field slots, in declaration order.
        field_providers: Providers of deferred field slots.
        method_slots: Ordered parameter slots per ``@inject`` method.
        method_providers: Providers of deferred slots, per method.
    """

    def __init__(
        self,
        binding_index: "BindingIndex",
        name: str,
        scope: str,
        qualifiers: Iterable[Qualifier],
        declaring_type: type,
        exposed_types: FrozenSet[type],
        constructor: Optional[ConstructorSite] = None,
        constructor_slots: Tuple[InjectionSlot, ...] = (),
        constructor_providers: ProviderMap = _EMPTY,
        field_slots: Tuple[InjectionSlot, ...] = (),
        field_providers: ProviderMap = _EMPTY,
        method_slots: Optional[Mapping[MethodSite, Tuple[InjectionSlot, ...]]] = None,
        method_providers: Optional[Mapping[MethodSite, ProviderMap]] = None,
    ) -> None:
        self._binding_index = binding_index
        self._name = name
        self._scope = scope
        self._qualifiers: Set[Qualifier] = set(qualifiers)
        self.declaring_type = declaring_type
        self.exposed_types = exposed_types
        self.constructor = constructor
        self.constructor_slots = constructor_slots
        self.constructor_providers = constructor_providers
        self.field_slots = field_slots
        self.field_providers = field_providers
        self.method_slots = MappingProxyType(dict(method_slots or {}))
        self.method_providers = MappingProxyType(dict(method_providers or {}))
        self.naming_qualifier()

    @property
    def name(self) -> str:
        return self._name

    @property
    def scope(self) -> str:
        return self._scope

    @property
    def qualifiers(self) -> FrozenSet[Qualifier]:
        return frozenset(self._qualifiers)

    @property
    def injection_slots(self) -> FrozenSet[InjectionSlot]:
        """Every constructor, field and method slot of this component."""
        out = set(self.constructor_slots)
        out.update(self.field_slots)
        for slots in self.method_slots.values():
            out.update(slots)
        return frozenset(out)

    def naming_qualifier(self) -> Named:
        """Return the single ``Named`` qualifier.

        Raises:
            QualifierIntegrityError: If there is not exactly one.
        """
        named = [q for q in self._qualifiers if isinstance(q, Named)]
        if len(named) != 1:
            raise QualifierIntegrityError(self.declaring_type, len(named))
        return named[0]

    def named(self, name: str) -> "ComponentDescriptor":
        return self.qualified(Named(name))

    def qualified(self, qualifier: Qualifier, *qualifiers: Qualifier) -> "ComponentDescriptor":
        self._add_qualifier(qualifier)
        for q in qualifiers:
            self._add_qualifier(q)
        return self

    def scoped(self, scope: str) -> "ComponentDescriptor":
        self._scope = scope
        return self

    def _add_qualifier(self, qualifier: Any) -> None:
        if not isinstance(qualifier, Qualifier):
            qualifier = Qualifier(qualifier)

        if isinstance(qualifier, Named):
            current = self.naming_qualifier()
            if current.value == qualifier.value:
                return
            self._qualifiers.discard(current)
            self._qualifiers.add(qualifier)
            LOGGER.debug("Renamed component %s -> %s", self._name, qualifier.value)
            self._name = qualifier.value
        else:
            if qualifier in self._qualifiers:
                return
            self._qualifiers.add(qualifier)

        self._binding_index.bind_qualifier(self.declaring_type, qualifier)

    def __repr__(self) -> str:
        qs = ", ".join(sorted(repr(q) for q in self._qualifiers))
        types = ", ".join(sorted(t.__name__ for t in self.exposed_types))
        return (
            f"[name={self._name}, scope={self._scope}, qualifiers={{{qs}}}, "
            f"class={self.declaring_type.__module__}.{self.declaring_type.__qualname__}, types={{{types}}}]"
        )
