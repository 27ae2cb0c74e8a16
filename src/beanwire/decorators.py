# beanwire/decorators.py
from __future__ import annotations
from typing import Any, Iterable, Optional

from .constants import CLEANUP_FLAG, COMPONENT_META, INJECT_FLAG, QUALIFIERS_KEY, SCOPE_SINGLETON


class Qualifier(str):
    """A typed marker narrowing which component satisfies a slot.

    Qualifiers are strings, but two qualifiers are equal only when their
    types match too, so ``Named("db") != Qualifier("db")``.
    """
    __slots__ = ()

    @property
    def value(self) -> str:
        return str(self)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and str.__eq__(self, other)

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash((type(self).__name__, str(self)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str.__repr__(self)})"


class Named(Qualifier):
    """The naming qualifier; every descriptor carries exactly one."""
    __slots__ = ()


DEFAULT = Qualifier("Default")


def inject(obj):
    """Mark ``__init__``, a classmethod constructor, or a method as an injection point."""
    target = obj.__func__ if isinstance(obj, (classmethod, staticmethod)) else obj
    setattr(target, INJECT_FLAG, True)
    return obj


def is_injectable(obj: Any) -> bool:
    target = obj.__func__ if isinstance(obj, (classmethod, staticmethod)) else obj
    return bool(getattr(target, INJECT_FLAG, False))


class Inject:
    """Field marker: declares a class attribute as an injection point.

    Usage::

        class OrderService:
            repo: OrderRepository = Inject()
            cache: Cache = Inject(named="redis")
            clock: Provider[Clock] = Inject()
    """

    __slots__ = ("qualifiers",)

    def __init__(self, *qualifiers: Qualifier, named: Optional[str] = None) -> None:
        qs = [q if isinstance(q, Qualifier) else Qualifier(q) for q in qualifiers]
        if named is not None:
            qs.append(Named(named))
        self.qualifiers = frozenset(qs)

    def __repr__(self) -> str:
        if not self.qualifiers:
            return "Inject()"
        return f"Inject({', '.join(sorted(repr(q) for q in self.qualifiers))})"


def component(cls=None, *, name: Optional[str] = None, scope: str = SCOPE_SINGLETON):
    def dec(c):
        setattr(c, COMPONENT_META, {"name": name, "scope": scope})
        return c
    return dec(cls) if cls else dec


def qualifier(*qs: Qualifier):
    def dec(cls):
        current: Iterable[Qualifier] = cls.__dict__.get(QUALIFIERS_KEY, ())
        seen = set(current)
        merged = list(current)
        for q in qs:
            q = q if isinstance(q, Qualifier) else Qualifier(q)
            if q not in seen:
                merged.append(q)
                seen.add(q)
        setattr(cls, QUALIFIERS_KEY, tuple(merged))
        return cls
    return dec


def cleanup(fn):
    """Mark a method to be called when the registry destroys the instance."""
    setattr(fn, CLEANUP_FLAG, True)
    return fn


__all__ = [
    # qualifier types
    "Qualifier", "Named", "DEFAULT",
    # markers
    "inject", "is_injectable", "Inject",
    # decorators
    "component", "qualifier", "cleanup",
]
