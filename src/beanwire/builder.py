"""Descriptor builder.

Introspects a class once, at registration, and produces the
:class:`~beanwire.descriptor.ComponentDescriptor` holding its constructor,
field and method injection slots.
"""

import inspect
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .constants import COMPONENT_META, LOGGER, QUALIFIERS_KEY, SCOPE_SINGLETON
from .decorators import DEFAULT, Inject, Named, Qualifier, is_injectable
from .descriptor import ComponentDescriptor, ProviderMap
from .exceptions import AmbiguousConstructorError, QualifierIntegrityError
from .providers import SlotProvider
from .slots import (
    ConstructorSite,
    FieldSite,
    InjectionSlot,
    MethodSite,
    analyze_field,
    analyze_parameters,
    field_annotations,
)

if TYPE_CHECKING:
    from .registry import Registry


def default_name(cls: type) -> str:
    """``UserService`` -> ``userService``."""
    n = cls.__name__
    return n[:1].lower() + n[1:]


def _providers_for(registry: "Registry", slots: Tuple[InjectionSlot, ...]) -> ProviderMap:
    return MappingProxyType({s: SlotProvider(registry, s) for s in slots if s.deferred})


def _identity(cls: type) -> Tuple[str, str, List[Qualifier]]:
    meta = cls.__dict__.get(COMPONENT_META, {})
    declared = [
        q if isinstance(q, Qualifier) else Qualifier(q)
        for q in cls.__dict__.get(QUALIFIERS_KEY, ())
    ]
    named = [q for q in declared if isinstance(q, Named)]
    if len(named) > 1:
        raise QualifierIntegrityError(cls, len(named))

    if named and meta.get("name") and meta["name"] != named[0].value:
        raise QualifierIntegrityError(cls, 2)

    name = meta.get("name") or (named[0].value if named else default_name(cls))
    others = [q for q in declared if not isinstance(q, Named)]
    if not others:
        others = [DEFAULT]
    return name, meta.get("scope", SCOPE_SINGLETON), [Named(name), *others]


def _find_constructor(cls: type) -> Optional[ConstructorSite]:
    found: List[ConstructorSite] = []
    for attr, raw in cls.__dict__.items():
        if attr == "__init__" and inspect.isfunction(raw) and is_injectable(raw):
            found.append(ConstructorSite(cls, attr, raw))
        elif isinstance(raw, classmethod) and is_injectable(raw):
            found.append(ConstructorSite(cls, attr, raw.__func__))
    if len(found) > 1:
        raise AmbiguousConstructorError(cls, [c.name for c in found])
    if found:
        return found[0]

    # Python inherits __init__: the nearest one in the MRO is what cls() runs
    for base in cls.__mro__:
        raw = base.__dict__.get("__init__")
        if raw is None:
            continue
        if inspect.isfunction(raw) and is_injectable(raw):
            return ConstructorSite(base, "__init__", raw)
        return None
    return None


def _find_fields(cls: type) -> Tuple[InjectionSlot, ...]:
    annotations = field_annotations(cls)
    slots: List[InjectionSlot] = []
    for attr, raw in cls.__dict__.items():
        if isinstance(raw, Inject):
            ann = annotations.get(attr, inspect.Parameter.empty)
            slots.append(analyze_field(FieldSite(cls, attr), ann, raw.qualifiers))
    return tuple(slots)


def _find_methods(cls: type) -> Tuple[MethodSite, ...]:
    return tuple(
        MethodSite(cls, attr, raw)
        for attr, raw in cls.__dict__.items()
        if attr != "__init__" and inspect.isfunction(raw) and is_injectable(raw)
    )


def build_descriptor(cls: type, registry: "Registry") -> ComponentDescriptor:
    """Introspect *cls* and build its descriptor.

    Only members declared on *cls* itself are scanned; inherited injection
    points belong to the ancestor's own descriptor. The one exception is an
    inherited ``@inject`` ``__init__``, which becomes the constructor when
    *cls* declares none.

    Args:
        cls: The component class.
        registry: Registry used for deferred lookups and qualifier bindings.

    Returns:
        The descriptor, with immutable slot collections.

    Raises:
        AmbiguousConstructorError: If more than one constructor is marked
            with ``@inject``.
        QualifierIntegrityError: If the class declares several ``Named``
            qualifiers, or a component name that contradicts its ``Named``
            qualifier.
        ConfigurationError: If the annotation of an injection point cannot
            be resolved.
    """
    name, scope, qualifiers = _identity(cls)

    constructor = _find_constructor(cls)
    constructor_slots = analyze_parameters(constructor) if constructor else ()

    field_slots = _find_fields(cls)

    method_slots: Dict[MethodSite, Tuple[InjectionSlot, ...]] = {}
    method_providers: Dict[MethodSite, ProviderMap] = {}
    for site in _find_methods(cls):
        slots = analyze_parameters(site)
        method_slots[site] = slots
        method_providers[site] = _providers_for(registry, slots)

    descriptor = ComponentDescriptor(
        registry.get_binding_index(),
        name=name,
        scope=scope,
        qualifiers=qualifiers,
        declaring_type=cls,
        exposed_types=frozenset(t for t in cls.__mro__ if t is not object),
        constructor=constructor,
        constructor_slots=constructor_slots,
        constructor_providers=_providers_for(registry, constructor_slots),
        field_slots=field_slots,
        field_providers=_providers_for(registry, field_slots),
        method_slots=method_slots,
        method_providers=method_providers,
    )
    LOGGER.debug(
        "Built descriptor %s: constructor=%s fields=%d methods=%d",
        descriptor.name,
        constructor,
        len(field_slots),
        len(method_slots),
    )
    return descriptor
