"""Tests for PEP 563 compatibility (from __future__ import annotations).

When `from __future__ import annotations` is active, all type hints become
strings at runtime. beanwire must resolve them via typing.get_type_hints().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Optional

import pytest

from beanwire import ComponentRegistry, Inject, Named, Provider, SlotProvider, inject
from beanwire.exceptions import ConfigurationError

if TYPE_CHECKING:
    from decimal import Decimal


class Repo:
    pass


class Clock:
    pass


class Service:
    clock: Provider[Clock] = Inject()
    backup: Optional[Repo] = Inject()

    @inject
    def __init__(self, repo: Annotated[Repo, Named("repo")]):
        self.repo = repo


def test_string_annotations_are_resolved():
    reg = ComponentRegistry()
    d = reg.register(Service)

    (repo,) = d.constructor_slots
    assert repo.required_type is Repo
    assert repo.qualifiers == frozenset({Named("repo")})

    clock, backup = d.field_slots
    assert clock.deferred and clock.required_type is Clock
    assert backup.optional and backup.required_type is Repo


def test_string_annotations_wire_end_to_end():
    reg = ComponentRegistry()
    reg.register(Repo)
    reg.register(Service)

    svc = reg.get(Service)
    assert svc.repo is reg.get(Repo)
    assert svc.backup is svc.repo
    assert isinstance(svc.clock, SlotProvider)


class Ledger:
    repo: Repo = Inject()
    total: Decimal


class BrokenField:
    amount: Decimal = Inject()


class BrokenConstructor:
    @inject
    def __init__(self, amount: Decimal):
        self.amount = amount


def test_unresolvable_plain_annotation_does_not_affect_injected_fields():
    reg = ComponentRegistry()
    d = reg.register(Ledger)

    (repo,) = d.field_slots
    assert repo.required_type is Repo


def test_unresolvable_plain_annotation_still_wires_end_to_end():
    reg = ComponentRegistry()
    reg.register(Repo)
    reg.register(Ledger)

    ledger = reg.get(Ledger)
    assert ledger.repo is reg.get(Repo)


def test_unresolvable_injected_field_fails_at_registration():
    reg = ComponentRegistry()
    with pytest.raises(ConfigurationError, match="BrokenField.amount"):
        reg.register(BrokenField)
    assert reg.get_descriptor(BrokenField) is None


def test_unresolvable_injected_parameter_fails_at_registration():
    reg = ComponentRegistry()
    with pytest.raises(ConfigurationError, match="Decimal"):
        reg.register(BrokenConstructor)
