import copy

import pytest

from questionbank.core.errors import ProjectionError
from questionbank.models.orm import StudentPermission
from questionbank.services.fragments import (
    base_fields, gradings, official_answers, participant_answers, tags, type_specific_public,
)
from questionbank.services.projection import UNFILTERED, Nested, compose


def test_compose_is_commutative_for_disjoint_relations():
    a = tags()
    b = {"group": Nested({"label": True})}
    assert compose(a, b) == compose(b, a)


def test_compose_is_idempotent():
    for fragment in (base_fields(True), tags(), type_specific_public(), official_answers(),
                     participant_answers("a@example.org"), gradings()):
        assert compose(fragment, fragment) == fragment


def test_compose_is_associative():
    a, b, c = base_fields(), type_specific_public(), official_answers()
    assert compose(compose(a, b), c) == compose(a, compose(b, c))


def test_true_is_absorbed_by_nested_node():
    rich = {"sandbox": Nested({"image": True})}
    assert compose({"sandbox": True}, rich) == rich
    assert compose(rich, {"sandbox": True}) == rich


def test_nested_selects_are_unioned():
    merged = compose(
        {"options": Nested({"id": True, "text": True}, order_by=("order",))},
        {"options": Nested({"is_correct": True})},
    )
    assert merged["options"].select == {"id": True, "text": True, "is_correct": True}
    assert merged["options"].order_by == ("order",)


def test_later_order_by_wins():
    merged = compose(
        {"fields": Nested({"id": True}, order_by="order")},
        {"fields": Nested({"id": True}, order_by=("-id",))},
    )
    assert merged["fields"].order_by == ("-id",)


def test_unfiltered_widens_in_either_order():
    hidden = {"student_permission": {"not": StudentPermission.HIDDEN}}
    public = {"template_files": Nested({"order": True}, where=hidden)}
    official = {"template_files": Nested({"file": True}, where=UNFILTERED)}
    assert compose(public, official)["template_files"].where is UNFILTERED
    assert compose(official, public)["template_files"].where is UNFILTERED


def test_where_conditions_are_conjoined():
    merged = compose(
        {"student_answers": Nested({"id": True}, where={"user_email": "a@example.org"})},
        {"student_answers": Nested({"status": True}, where={"status": "SUBMITTED"})},
    )
    assert merged["student_answers"].where == {"user_email": "a@example.org", "status": "SUBMITTED"}


def test_compose_does_not_mutate_inputs():
    a = type_specific_public()
    b = official_answers()
    a_before, b_before = copy.deepcopy(a), copy.deepcopy(b)
    compose(a, b)
    assert a == a_before
    assert b == b_before


def test_builders_return_fresh_trees():
    first = type_specific_public()
    first["multiple_choice"].select["options"].select["is_correct"] = True
    assert "is_correct" not in type_specific_public()["multiple_choice"].select["options"].select


def test_invalid_node_is_rejected():
    with pytest.raises(ProjectionError):
        compose({"title": False})
