import inspect
import sys
import types
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, List, Optional, Tuple, Union, get_args, get_origin, Annotated

from .decorators import Named, Qualifier
from .exceptions import ConfigurationError
from .providers import is_provider_type


@dataclass(frozen=True)
class ConstructorSite:
    declaring_type: type
    name: str
    function: Callable[..., Any] = field(compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.declaring_type.__name__}.{self.name}"


@dataclass(frozen=True)
class FieldSite:
    declaring_type: type
    name: str

    def __str__(self) -> str:
        return f"{self.declaring_type.__name__}.{self.name}"


@dataclass(frozen=True)
class MethodSite:
    declaring_type: type
    name: str
    function: Callable[..., Any] = field(compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.declaring_type.__name__}.{self.name}"


SiteT = Union[ConstructorSite, FieldSite, MethodSite]


@dataclass(frozen=True)
class InjectionSlot:
    """A single site needing a value.

    Attributes:
        site: The constructor, field or method owning the slot.
        name: Parameter or field name.
        position: Parameter index, ``None`` for fields.
        required_type: The type looked up in the registry. For deferred slots
            this is ``T`` in ``Provider[T]``.
        qualifiers: Qualifiers every candidate must carry.
        deferred: The declared type was ``Provider[T]``.
        optional: The declared type was ``Optional[T]`` or the parameter has
            a default. Informative only; every slot may resolve to ``None``.
        keyword_only: The parameter must be passed by keyword.
    """
    site: SiteT
    name: str
    position: Optional[int]
    required_type: Any
    qualifiers: FrozenSet[Qualifier] = frozenset()
    deferred: bool = False
    optional: bool = False
    keyword_only: bool = False


def _check_optional(ann: Any) -> Tuple[Any, bool]:
    origin = get_origin(ann)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(ann) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return ann, False


def _extract_annotated(ann: Any) -> Tuple[Any, List[Qualifier]]:
    qualifiers: List[Qualifier] = []
    base = ann
    if get_origin(ann) is Annotated:
        args = get_args(ann)
        base = args[0] if args else Any
        for m in args[1:]:
            if isinstance(m, Qualifier):
                qualifiers.append(m)
    return base, qualifiers


def split_annotation(ann: Any) -> Tuple[Any, FrozenSet[Qualifier], bool, bool]:
    """Reduce a declared type to ``(required_type, qualifiers, optional, deferred)``."""
    base, optional = _check_optional(ann)
    base, qualifiers = _extract_annotated(base)
    if not optional:
        base, optional = _check_optional(base)

    deferred = is_provider_type(base)
    if deferred:
        args = get_args(base)
        base = args[0] if args else Any
        base, inner = _extract_annotated(base)
        qualifiers.extend(inner)
    return base, frozenset(qualifiers), optional, deferred


def _resolve_annotation(owner: str, member: str, annotation: Any, globalns: dict, localns: Optional[dict]) -> Any:
    # resolved per member, independent of the owner's other hints
    holder = types.SimpleNamespace(__annotations__={member: annotation})
    try:
        return typing.get_type_hints(holder, globalns, localns, include_extras=True)[member]
    except (NameError, AttributeError, SyntaxError, TypeError) as e:
        raise ConfigurationError(f"Cannot resolve annotation {annotation!r} of {owner}: {e}") from e


def _class_namespaces(cls: type) -> Tuple[dict, dict]:
    module = sys.modules.get(cls.__module__)
    return getattr(module, "__dict__", {}), dict(vars(cls))


def analyze_parameters(site: Union[ConstructorSite, MethodSite]) -> Tuple[InjectionSlot, ...]:
    fn = site.function
    try:
        sig = inspect.signature(fn)
    except (ValueError, TypeError):
        return ()
    globalns = getattr(inspect.unwrap(fn), "__globals__", {})

    slots: List[InjectionSlot] = []
    params = list(sig.parameters.values())
    # self / cls
    if params and params[0].kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
        params = params[1:]

    for param in params:
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        ann = param.annotation
        if ann is inspect.Parameter.empty:
            # unannotated: looked up by name
            required, qualifiers, optional, deferred = Any, frozenset({Named(param.name)}), False, False
        else:
            ann = _resolve_annotation(f"{site}({param.name})", param.name, ann, globalns, None)
            required, qualifiers, optional, deferred = split_annotation(ann)

        slots.append(
            InjectionSlot(
                site=site,
                name=param.name,
                position=len(slots),
                required_type=required,
                qualifiers=qualifiers,
                deferred=deferred,
                optional=optional or param.default is not inspect.Parameter.empty,
                keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
            )
        )
    return tuple(slots)


def analyze_field(site: FieldSite, annotation: Any, extra: FrozenSet[Qualifier] = frozenset()) -> InjectionSlot:
    if annotation is inspect.Parameter.empty:
        required, qualifiers, optional, deferred = Any, frozenset({Named(site.name)}), False, False
    else:
        annotation = _resolve_annotation(str(site), site.name, annotation, *_class_namespaces(site.declaring_type))
        required, qualifiers, optional, deferred = split_annotation(annotation)
    return InjectionSlot(
        site=site,
        name=site.name,
        position=None,
        required_type=required,
        qualifiers=qualifiers | extra,
        deferred=deferred,
        optional=optional,
    )


def field_annotations(cls: type) -> dict:
    """Annotations declared on *cls* itself, unevaluated."""
    try:
        return dict(inspect.get_annotations(cls))
    except (NameError, TypeError):
        return {}
