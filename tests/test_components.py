from decimal import Decimal

import pytest

from gradebooks import lifecycle, services
from gradebooks.exceptions import LockedError, NotFoundError, PermissionDeniedError, StateError, ValidationError
from gradebooks.models import Component

pytestmark = pytest.mark.django_db


def test_add_component_assigns_next_sort_order(gradebook, components, trainer_actor):
    c = services.add_component(trainer_actor, gradebook.pk, "Theory Test 3", "test", "40")
    assert c.sort_order == len(components) + 1
    assert c.max_marks == Decimal("40")


@pytest.mark.parametrize(
    "name,component_type,max_marks",
    [
        ("", "test", "100"),
        ("   ", "test", "100"),
        ("Quiz", "test", "0"),
        ("Quiz", "test", "-5"),
        ("Quiz", "test", "lots"),
        ("Quiz", "test", "abc"),
        ("Quiz", "test", "NaN"),
        ("Quiz", "test", "Infinity"),
        ("Quiz", "essay", "100"),
    ],
)
def test_add_component_validation(gradebook, trainer_actor, name, component_type, max_marks):
    with pytest.raises(ValidationError):
        services.add_component(trainer_actor, gradebook.pk, name, component_type, max_marks)
    assert not Component.objects.filter(gradebook=gradebook).exists()


def test_add_component_unknown_gradebook(trainer_actor):
    with pytest.raises(NotFoundError):
        services.add_component(trainer_actor, 424242, "Quiz", "test", "10")


def test_add_component_with_group(gradebook, trainer_actor):
    group = services.create_group(trainer_actor, gradebook.pk, "Theory", "theory")
    c = services.add_component(trainer_actor, gradebook.pk, "Quiz", "test", "10", group_id=group.pk)
    assert c.group_id == group.pk


def test_delete_component_while_unlocked(gradebook, components, trainer_actor):
    services.delete_component(trainer_actor, components[1].pk)
    assert not Component.objects.filter(pk=components[1].pk).exists()


def test_delete_blocked_gradebook_wide_once_locked(gradebook, enrolled, components, trainer_actor):
    services.save_mark(trainer_actor, gradebook.pk, components[0].pk, enrolled[0].pk, "70")

    for c in components:
        with pytest.raises(LockedError):
            services.delete_component(trainer_actor, c.pk)
    assert Component.objects.filter(gradebook=gradebook).count() == len(components)


def test_add_component_allowed_while_locked(gradebook, enrolled, components, trainer_actor):
    services.save_mark(trainer_actor, gradebook.pk, components[0].pk, enrolled[0].pk, "70")
    lifecycle.submit(gradebook.pk, trainer_actor)

    c = services.add_component(trainer_actor, gradebook.pk, "Late Practical", "practical", "20")
    assert c.gradebook_id == gradebook.pk


def test_add_component_refused_when_submitted_and_unlocked(gradebook, trainer_actor):
    lifecycle.submit(gradebook.pk, trainer_actor)
    with pytest.raises(StateError):
        services.add_component(trainer_actor, gradebook.pk, "Quiz", "test", "10")


def test_only_trainer_changes_structure(gradebook, components, hot_actor):
    with pytest.raises(StateError):
        services.add_component(hot_actor, gradebook.pk, "Quiz", "test", "10")
    with pytest.raises(StateError):
        services.delete_component(hot_actor, components[0].pk)


def test_delete_missing_component(trainer_actor):
    with pytest.raises(NotFoundError):
        services.delete_component(trainer_actor, 999999)


def test_group_type_validated(gradebook, trainer_actor):
    with pytest.raises(ValidationError):
        services.create_group(trainer_actor, gradebook.pk, "Misc", "elective")


def test_other_trainer_cannot_change_structure(gradebook, components, other_trainer_actor):
    with pytest.raises(PermissionDeniedError):
        services.add_component(other_trainer_actor, gradebook.pk, "Quiz", "test", "10")
    with pytest.raises(PermissionDeniedError):
        services.delete_component(other_trainer_actor, components[0].pk)
    with pytest.raises(PermissionDeniedError):
        services.create_group(other_trainer_actor, gradebook.pk, "Term 1", "theory")
    assert Component.objects.filter(gradebook=gradebook).count() == 4
