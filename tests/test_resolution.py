from abc import ABC, abstractmethod

import pytest

from beanwire import Inject, Provider, SlotProvider, create, inject, resolve_into
from beanwire.exceptions import ProviderNotFoundError
from beanwire.resolution import ancestor_chain, resolve_slot


class GDep: ...
class PDep: ...
class CDep: ...
class Clock: ...
class Missing: ...


def test_ancestor_chain_most_distant_first():
    class A: ...
    class B(A): ...
    class C(B): ...

    assert ancestor_chain(C) == (A, B)
    assert ancestor_chain(A) == ()


def test_three_level_chain_resolves_top_down(fake_registry):
    calls = []

    class Grandparent:
        g: GDep = Inject()

        @inject
        def setup_grandparent(self, dep: GDep):
            calls.append("grandparent")

    class Parent(Grandparent):
        p: PDep = Inject()

        @inject
        def setup_parent(self, dep: PDep):
            calls.append("parent")

    class Child(Parent):
        c: CDep = Inject()

        @inject
        def setup_child(self, dep: CDep):
            calls.append("child")

    deps = {GDep: GDep(), PDep: PDep(), CDep: CDep()}
    fake_registry.values.update(deps)
    fake_registry.add(Grandparent)
    fake_registry.add(Parent)
    child = fake_registry.add(Child)

    obj = create(child, fake_registry)

    assert fake_registry.lookups == [GDep, GDep, PDep, PDep, CDep, CDep]
    assert calls == ["grandparent", "parent", "child"]
    assert (obj.g, obj.p, obj.c) == (deps[GDep], deps[PDep], deps[CDep])


def test_unregistered_ancestor_is_skipped(fake_registry):
    class Base:
        b: GDep = Inject()

    class Leaf(Base):
        c: CDep = Inject()

    fake_registry.values.update({GDep: GDep(), CDep: CDep()})
    obj = create(fake_registry.add(Leaf), fake_registry)

    assert fake_registry.lookups == [CDep]
    assert "b" not in vars(obj)


def test_abstract_ancestor_is_skipped(fake_registry):
    class Base(ABC):
        b: GDep = Inject()

        @abstractmethod
        def run(self): ...

    class Impl(Base):
        def run(self):
            return "ok"

    fake_registry.values[GDep] = GDep()
    fake_registry.add(Base)
    obj = create(fake_registry.add(Impl), fake_registry)

    assert obj.run() == "ok"
    assert fake_registry.lookups == []


def test_each_level_invokes_its_own_method(fake_registry):
    calls = []

    class Parent:
        @inject
        def setup(self, dep: PDep):
            calls.append(("parent", dep))

    class Child(Parent):
        @inject
        def setup(self, dep: CDep):
            calls.append(("child", dep))

    fake_registry.values.update({PDep: "p", CDep: "c"})
    fake_registry.add(Parent)
    create(fake_registry.add(Child), fake_registry)

    assert calls == [("parent", "p"), ("child", "c")]


def test_method_is_invoked_once_with_complete_arguments(fake_registry):
    calls = []

    class Svc:
        @inject
        def wire(self, first: GDep, missing: Missing, *, last: CDep):
            calls.append((first, missing, last))

    fake_registry.values.update({GDep: "g", CDep: "c"})
    create(fake_registry.add(Svc), fake_registry)

    assert calls == [("g", None, "c")]


def test_fields_then_methods_within_a_level(fake_registry):
    seen = []

    class Svc:
        dep: GDep = Inject()

        @inject
        def after(self, other: CDep):
            seen.append(self.dep)

    fake_registry.values.update({GDep: "g", CDep: "c"})
    create(fake_registry.add(Svc), fake_registry)
    assert seen == ["g"]


def test_unresolved_field_is_none_without_error(fake_registry):
    class Svc:
        missing: Missing = Inject()

    obj = create(fake_registry.add(Svc), fake_registry)
    assert obj is not None
    assert obj.missing is None


def test_deferred_field_gets_provider_when_no_direct_match(fake_registry):
    class Svc:
        clock: Provider[Clock] = Inject()

    d = fake_registry.add(Svc)
    obj = create(d, fake_registry)

    (slot,) = d.field_slots
    assert isinstance(obj.clock, SlotProvider)
    assert obj.clock is d.field_providers[slot]
    assert fake_registry.lookups == [Clock]

    with pytest.raises(ProviderNotFoundError):
        obj.clock.get()

    clock = Clock()
    fake_registry.values[Clock] = clock
    assert obj.clock.get() is clock
    assert obj.clock() is clock


def test_deferred_field_gets_direct_value_when_matched(fake_registry):
    class Svc:
        clock: Provider[Clock] = Inject()

    clock = Clock()
    fake_registry.values[Clock] = clock
    obj = create(fake_registry.add(Svc), fake_registry)
    assert obj.clock is clock


def test_deferred_method_parameter_falls_back_to_provider(fake_registry):
    got = []

    class Svc:
        @inject
        def wire(self, clock: Provider[Clock]):
            got.append(clock)

    d = fake_registry.add(Svc)
    create(d, fake_registry)

    ((site, (slot,)),) = d.method_slots.items()
    assert got == [d.method_providers[site][slot]]


def test_resolve_slot_plain_miss_is_none(fake_registry):
    class Svc:
        missing: Missing = Inject()

    (slot,) = fake_registry.add(Svc).field_slots
    assert resolve_slot(slot, {}, fake_registry) is None


def test_resolve_into_propagates_errors(fake_registry):
    class Svc:
        @inject
        def wire(self, dep: GDep):
            raise ValueError("bad wiring")

    d = fake_registry.add(Svc)
    with pytest.raises(ValueError, match="bad wiring"):
        resolve_into(Svc(), d, fake_registry)
