from decimal import Decimal

import pytest

from gradebooks.exceptions import NotFoundError, ValidationError
from gradebooks.models import Mark
from gradebooks.staging import StagedEdits, cell_key, parse_cell_key


def test_cell_key_round_trip():
    assert cell_key(12, 34) == "12_34"
    assert parse_cell_key("12_34") == (12, 34)
    with pytest.raises(ValidationError):
        parse_cell_key("12-34")


def test_stage_merges_into_one_edit():
    staged = StagedEdits(1)
    staged.stage(5, 9, marks="40")
    staged.stage(5, 9, feedback="Check units")

    assert len(staged) == 1
    assert staged.to_dict() == {"5_9": {"marks": "40", "competency": "pending", "feedback": "Check units"}}


def test_stage_rejects_unknown_competency():
    with pytest.raises(ValidationError):
        StagedEdits(1).stage(5, 9, competency="excellent")


def test_session_round_trip():
    session = {}
    staged = StagedEdits(3)
    staged.stage(1, 2, marks="7", competency="competent")
    staged.save_to_session(session)

    restored = StagedEdits.from_session(session, 3)
    assert restored.to_dict() == staged.to_dict()

    restored.discard("1_2")
    restored.save_to_session(session)
    assert session == {}


@pytest.mark.django_db
def test_commit_writes_mark_and_drops_edit(gradebook, enrolled, components, trainer_actor):
    staged = StagedEdits(gradebook.pk)
    key = cell_key(components[0].pk, enrolled[0].pk)
    staged.stage(components[0].pk, enrolled[0].pk, marks="64")

    staged.commit(key, trainer_actor)

    assert key not in staged
    assert Mark.objects.get(component=components[0], trainee=enrolled[0]).marks_obtained == Decimal("64")


@pytest.mark.django_db
def test_failed_commit_keeps_edit(gradebook, enrolled, components, trainer_actor):
    staged = StagedEdits(gradebook.pk)
    key = cell_key(components[1].pk, enrolled[0].pk)
    staged.stage(components[1].pk, enrolled[0].pk, marks="75")  # max is 50

    with pytest.raises(ValidationError):
        staged.commit(key, trainer_actor)

    assert key in staged
    assert not Mark.objects.exists()


@pytest.mark.django_db
def test_commit_unknown_key(gradebook, trainer_actor):
    with pytest.raises(NotFoundError):
        StagedEdits(gradebook.pk).commit("1_1", trainer_actor)


@pytest.mark.django_db
def test_commit_all(gradebook, enrolled, components, trainer_actor):
    staged = StagedEdits(gradebook.pk)
    for t in enrolled:
        staged.stage(components[0].pk, t.pk, marks="50", feedback="ok")

    marks = staged.commit_all(trainer_actor)

    assert len(marks) == 2
    assert len(staged) == 0
    assert Mark.objects.filter(gradebook=gradebook).count() == 2


@pytest.mark.parametrize("component_id,trainee_id", [(5, "2_3"), ("5_1", 9), (" ", 9), (5, "-1")])
def test_stage_rejects_ambiguous_ids(component_id, trainee_id):
    staged = StagedEdits(1)
    with pytest.raises(ValidationError):
        staged.stage(component_id, trainee_id, marks="40")
    assert len(staged) == 0


@pytest.mark.parametrize("key", ["1_2_3", "_12", "12_", "a_b"])
def test_parse_cell_key_rejects_malformed(key):
    with pytest.raises(ValidationError):
        parse_cell_key(key)
