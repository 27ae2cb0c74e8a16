"""Registry interfaces and the in-memory reference registry.

The resolution core only talks to a :class:`Registry` and its
:class:`BindingIndex`. :class:`ComponentRegistry` is a small concrete
implementation: it registers classes, answers ``(type, qualifiers)`` lookups
through a :class:`QualifierBindingIndex`, and applies the ``singleton`` /
``prototype`` scope policy with :class:`ScopedCaches`.
"""

import contextvars
import logging
import threading
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Protocol, Set, Tuple, Union

from .builder import build_descriptor
from .constants import SCOPE_PROTOTYPE, SCOPE_SINGLETON
from .construction import create_result, destroy
from .decorators import DEFAULT, Named, Qualifier
from .descriptor import ComponentDescriptor
from .exceptions import CircularDependencyError, ConfigurationError, ScopeError

_logger = logging.getLogger(__name__)

KeyT = Union[str, type]

_creation_chain: contextvars.ContextVar[Tuple[type, ...]] = contextvars.ContextVar("beanwire_creation_chain", default=())


class BindingIndex(Protocol):
    def bind_qualifier(self, declaring_type: type, qualifier: Qualifier) -> None: ...


class Registry(Protocol):
    def lookup(self, required_type: Any, qualifiers: Iterable[Qualifier] = ()) -> Any: ...

    def get_descriptor(self, declaring_type: type) -> Optional[ComponentDescriptor]: ...

    def get_binding_index(self) -> BindingIndex: ...


class QualifierBindingIndex:
    """Maps qualifiers to the types bound to them, and back.

    Bindings are only ever added; a renamed component keeps its old ``Named``
    binding, so callers must confirm candidates against the descriptor.
    """

    def __init__(self) -> None:
        self._types: Dict[Qualifier, List[type]] = {}
        self._qualifiers: Dict[type, Set[Qualifier]] = {}

    def bind_qualifier(self, declaring_type: type, qualifier: Qualifier) -> None:
        bound = self._types.setdefault(qualifier, [])
        if declaring_type not in bound:
            bound.append(declaring_type)
        self._qualifiers.setdefault(declaring_type, set()).add(qualifier)

    def types_for(self, qualifier: Qualifier) -> Tuple[type, ...]:
        return tuple(self._types.get(qualifier, ()))

    def qualifiers_for(self, declaring_type: type) -> FrozenSet[Qualifier]:
        return frozenset(self._qualifiers.get(declaring_type, ()))


class _NameCheckingIndex(QualifierBindingIndex):
    """Binding index that warns when a rename takes a name already in use."""

    def __init__(self, descriptors: Dict[type, ComponentDescriptor]) -> None:
        super().__init__()
        self._descriptors = descriptors

    def bind_qualifier(self, declaring_type: type, qualifier: Qualifier) -> None:
        if isinstance(qualifier, Named):
            owner = _name_owner(self._descriptors, qualifier.value, declaring_type)
            if owner is not None:
                _logger.warning(
                    "Component %s renamed to '%s', already used by %s",
                    declaring_type.__name__,
                    qualifier.value,
                    owner.__name__,
                )
        super().bind_qualifier(declaring_type, qualifier)


def _name_owner(descriptors: Dict[type, ComponentDescriptor], name: str, exclude: type) -> Optional[type]:
    for t, d in descriptors.items():
        if t is not exclude and d.name == name:
            return t
    return None


class ComponentContainer:
    def __init__(self) -> None:
        self._instances: Dict[object, object] = {}

    def get(self, key):
        return self._instances.get(key)

    def put(self, key, value):
        self._instances[key] = value

    def items(self):
        return list(self._instances.items())

    def clear(self):
        self._instances.clear()


class _NoCacheContainer(ComponentContainer):
    def get(self, key):
        return None

    def put(self, key, value):
        return

    def items(self):
        return []


class ScopedCaches:
    """Instance storage per scope: one cache for singletons, none for prototypes."""

    def __init__(self) -> None:
        self._singleton = ComponentContainer()
        self._no_cache = _NoCacheContainer()

    def for_scope(self, scope: str) -> ComponentContainer:
        if scope == SCOPE_SINGLETON:
            return self._singleton
        if scope == SCOPE_PROTOTYPE:
            return self._no_cache
        raise ScopeError(f"Unknown scope: '{scope}'")

    def all_items(self):
        return self._singleton.items()

    def clear(self) -> None:
        self._singleton.clear()


class ComponentRegistry:
    """In-memory :class:`Registry`.

    Example:
        >>> registry = ComponentRegistry()
        >>> registry.register(Database)
        >>> registry.register(UserService)
        >>> registry.get(UserService).db is registry.get(Database)
        True
    """

    def __init__(self) -> None:
        self._descriptors: Dict[type, ComponentDescriptor] = {}
        self._index = _NameCheckingIndex(self._descriptors)
        self._caches = ScopedCaches()
        self._lock = threading.RLock()

    def register(self, cls: type) -> ComponentDescriptor:
        """Build and store the descriptor of *cls*, binding its qualifiers.

        Registering the same class twice returns the existing descriptor.

        Raises:
            ConfigurationError: If another registered class already uses the
                component name.
        """
        existing = self._descriptors.get(cls)
        if existing is not None:
            return existing
        descriptor = build_descriptor(cls, self)
        owner = _name_owner(self._descriptors, descriptor.name, cls)
        if owner is not None:
            raise ConfigurationError(
                f"Component name '{descriptor.name}' of {cls.__qualname__} is already used by {owner.__qualname__}"
            )
        self._descriptors[cls] = descriptor
        for q in descriptor.qualifiers:
            self._index.bind_qualifier(cls, q)
        _logger.debug("Registered component %r", descriptor)
        return descriptor

    def get_descriptor(self, declaring_type: type) -> Optional[ComponentDescriptor]:
        return self._descriptors.get(declaring_type)

    def get_binding_index(self) -> QualifierBindingIndex:
        return self._index

    def descriptors(self) -> Tuple[ComponentDescriptor, ...]:
        return tuple(self._descriptors.values())

    def candidates(self, required_type: Any, qualifiers: Iterable[Qualifier] = ()) -> List[ComponentDescriptor]:
        wanted = frozenset(qualifiers)
        if wanted:
            types: Optional[Set[type]] = None
            for q in wanted:
                bound = set(self._index.types_for(q))
                types = bound if types is None else types & bound
            pool = [d for t, d in self._descriptors.items() if t in (types or ())]
        else:
            pool = list(self._descriptors.values())
        return [d for d in pool if wanted <= d.qualifiers and self._exposes(d, required_type)]

    @staticmethod
    def _exposes(descriptor: ComponentDescriptor, required_type: Any) -> bool:
        if required_type is Any:
            return True
        try:
            if required_type in descriptor.exposed_types:
                return True
        except TypeError:
            return False
        try:
            return isinstance(required_type, type) and issubclass(descriptor.declaring_type, required_type)
        except TypeError:
            return False

    def _select(self, required_type: Any, qualifiers: Iterable[Qualifier]) -> Optional[ComponentDescriptor]:
        qualifiers = frozenset(qualifiers)
        cands = self.candidates(required_type, qualifiers)
        if not cands:
            return None
        if len(cands) > 1 and not qualifiers:
            defaults = [d for d in cands if DEFAULT in d.qualifiers]
            cands = defaults or cands
        if len(cands) > 1:
            _logger.warning(
                "Ambiguous lookup for %s with qualifiers %s: %s; using %s",
                getattr(required_type, "__name__", required_type),
                sorted(qualifiers),
                [d.name for d in cands],
                cands[0].name,
            )
        return cands[0]

    def lookup(self, required_type: Any, qualifiers: Iterable[Qualifier] = ()) -> Any:
        """Return an instance matching *required_type* and *qualifiers*, or ``None``.

        A component whose creation fails is reported as not found.
        """
        descriptor = self._select(required_type, qualifiers)
        if descriptor is None:
            return None
        return self._instance(descriptor)

    def get(self, key: KeyT) -> Any:
        if isinstance(key, str):
            return self.lookup(Any, (Named(key),))
        return self.lookup(key)

    def _instance(self, descriptor: ComponentDescriptor) -> Any:
        cache = self._caches.for_scope(descriptor.scope)
        key = descriptor.declaring_type
        with self._lock:
            cached = cache.get(key)
            if cached is not None:
                return cached

            chain = _creation_chain.get()
            if key in chain:
                raise CircularDependencyError(chain, key)
            token = _creation_chain.set(chain + (key,))
            try:
                creation = create_result(descriptor, self)
            finally:
                _creation_chain.reset(token)

            if creation.ok:
                cache.put(key, creation.instance)
            return creation.instance

    def shutdown(self) -> None:
        """Destroy every cached singleton and empty the cache."""
        with self._lock:
            for key, obj in self._caches.all_items():
                destroy(self._descriptors[key], obj)
            self._caches.clear()
