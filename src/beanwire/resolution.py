import functools
import inspect
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Tuple

from .slots import InjectionSlot

if TYPE_CHECKING:
    from .descriptor import ComponentDescriptor
    from .registry import Registry


@functools.lru_cache(maxsize=None)
def ancestor_chain(cls: type) -> Tuple[type, ...]:
    """Ancestors of *cls*, most distant first, excluding ``object`` and *cls*."""
    return tuple(t for t in reversed(cls.__mro__) if t is not object and t is not cls)


def _is_concrete(cls: type) -> bool:
    if inspect.isabstract(cls):
        return False
    return not getattr(cls, "_is_protocol", False)


def resolve_slot(slot: InjectionSlot, providers: Mapping[InjectionSlot, Any], registry: "Registry") -> Any:
    """Look *slot* up directly, falling back to its provider, then to ``None``."""
    value = registry.lookup(slot.required_type, slot.qualifiers)
    if value is None:
        value = providers.get(slot)
    return value


def resolve_arguments(
    slots: Tuple[InjectionSlot, ...], providers: Mapping[InjectionSlot, Any], registry: "Registry"
) -> Tuple[List[Any], Dict[str, Any]]:
    args: List[Any] = []
    kwargs: Dict[str, Any] = {}
    for slot in slots:
        value = resolve_slot(slot, providers, registry)
        if slot.keyword_only:
            kwargs[slot.name] = value
        else:
            args.append(value)
    return args, kwargs


def _apply_fields(instance: Any, descriptor: "ComponentDescriptor", registry: "Registry") -> None:
    for slot in descriptor.field_slots:
        setattr(instance, slot.name, resolve_slot(slot, descriptor.field_providers, registry))


def _apply_methods(instance: Any, descriptor: "ComponentDescriptor", registry: "Registry") -> None:
    for site, slots in descriptor.method_slots.items():
        args, kwargs = resolve_arguments(slots, descriptor.method_providers[site], registry)
        # the function declared at this level, even if a subclass overrides it
        site.function(instance, *args, **kwargs)


def resolve_into(instance: Any, descriptor: "ComponentDescriptor", registry: "Registry") -> None:
    """Populate the field and method slots of a freshly constructed *instance*.

    Registered concrete ancestors are applied first, most distant first,
    each level fields then methods; the descriptor's own slots come last.
    Exceptions propagate and abort the whole step.
    """
    for ancestor in ancestor_chain(descriptor.declaring_type):
        if not _is_concrete(ancestor):
            continue
        level = registry.get_descriptor(ancestor)
        if level is None:
            continue
        _apply_fields(instance, level, registry)
        _apply_methods(instance, level, registry)

    _apply_fields(instance, descriptor, registry)
    _apply_methods(instance, descriptor, registry)
