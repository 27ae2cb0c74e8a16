from typing import Annotated, Any, Optional

import pytest

from beanwire import Inject, Named, Provider, Qualifier
from beanwire.slots import (
    FieldSite,
    MethodSite,
    analyze_field,
    analyze_parameters,
    field_annotations,
    split_annotation,
)


class Repo: ...
class Clock: ...


class Owner:
    def wire(self, repo: Repo, clock: Provider[Clock], *args, flag: Optional[Repo] = None, **kwargs):
        pass

    def unannotated(self, db):
        pass


# --- split_annotation ---

@pytest.mark.parametrize(
    "ann, expected",
    [
        (Repo, (Repo, frozenset(), False, False)),
        (Optional[Repo], (Repo, frozenset(), True, False)),
        (Repo | None, (Repo, frozenset(), True, False)),
        (Annotated[Repo, Named("main")], (Repo, frozenset({Named("main")}), False, False)),
        (Optional[Annotated[Repo, Qualifier("fast")]], (Repo, frozenset({Qualifier("fast")}), True, False)),
        (Annotated[Optional[Repo], Qualifier("fast")], (Repo, frozenset({Qualifier("fast")}), True, False)),
        (Provider[Clock], (Clock, frozenset(), False, True)),
        (Provider[Annotated[Clock, Named("utc")]], (Clock, frozenset({Named("utc")}), False, True)),
        (Provider, (Any, frozenset(), False, True)),
    ],
)
def test_split_annotation(ann, expected):
    assert split_annotation(ann) == expected


def test_annotated_metadata_other_than_qualifiers_is_ignored():
    required, qualifiers, _, _ = split_annotation(Annotated[Repo, "docs", 42])
    assert required is Repo
    assert qualifiers == frozenset()


# --- parameters ---

def test_analyze_parameters_skips_self_and_varargs():
    site = MethodSite(Owner, "wire", Owner.wire)
    slots = analyze_parameters(site)

    assert [s.name for s in slots] == ["repo", "clock", "flag"]
    assert [s.position for s in slots] == [0, 1, 2]
    assert all(s.site is site for s in slots)


def test_analyze_parameters_flags():
    repo, clock, flag = analyze_parameters(MethodSite(Owner, "wire", Owner.wire))

    assert repo.required_type is Repo and not repo.deferred and not repo.optional
    assert clock.required_type is Clock and clock.deferred
    assert flag.optional and flag.keyword_only


def test_unannotated_parameter_is_looked_up_by_name():
    (slot,) = analyze_parameters(MethodSite(Owner, "unannotated", Owner.unannotated))
    assert slot.required_type is Any
    assert slot.qualifiers == frozenset({Named("db")})


# --- fields ---

def test_analyze_field_merges_marker_qualifiers():
    site = FieldSite(Owner, "repo")
    slot = analyze_field(site, Annotated[Repo, Qualifier("fast")], Inject(named="primary").qualifiers)

    assert slot.position is None
    assert slot.required_type is Repo
    assert slot.qualifiers == frozenset({Qualifier("fast"), Named("primary")})


def test_field_annotations_only_own_class():
    class Base:
        a: Repo = Inject()

    class Child(Base):
        b: Clock = Inject()

    assert field_annotations(Child) == {"b": Clock}


def test_slots_are_hashable_and_compare_by_site():
    s1 = analyze_parameters(MethodSite(Owner, "wire", Owner.wire))
    s2 = analyze_parameters(MethodSite(Owner, "wire", Owner.wire))
    assert s1 == s2
    assert len(set(s1) | set(s2)) == 3
