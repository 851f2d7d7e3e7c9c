import json
from decimal import Decimal
from types import SimpleNamespace

import pytest

from gradebooks import aggregator, services
from gradebooks.aggregator import OverallCompetency, compute_ca


def comp(id, component_type, max_marks=100):
    return SimpleNamespace(id=id, component_type=component_type, max_marks=Decimal(str(max_marks)))


def test_weighted_theory_ca():
    components = [comp(1, "test"), comp(2, "test"), comp(3, "mock")]
    marks = {1: Decimal("80"), 2: Decimal("60"), 3: Decimal("70")}

    result = compute_ca(components, marks, test_weight=60, mock_weight=40)

    assert result.test_avg == Decimal("70")
    assert result.mock_avg == Decimal("70")
    assert result.theory_ca == Decimal("70")
    assert result.theory_pass is True
    assert result.all_practicals_pass is True
    assert result.overall is OverallCompetency.COMPETENT


def test_failed_practical_without_theory_is_not_yet_competent():
    result = compute_ca([comp(1, "practical")], {1: Decimal("55")}, 40, 60)

    assert result.theory_ca is None
    assert result.theory_pass is False
    assert result.all_practicals_pass is False
    assert result.practicals[0].percentage == Decimal("55")
    assert result.overall is OverallCompetency.NOT_YET_COMPETENT


def test_no_marks_is_pending():
    components = [comp(1, "test"), comp(2, "mock"), comp(3, "practical")]
    result = compute_ca(components, {}, 40, 60)

    assert result.test_avg is None
    assert result.mock_avg is None
    assert result.theory_ca is None
    assert result.overall is OverallCompetency.PENDING


def test_null_marks_count_as_missing():
    result = compute_ca([comp(1, "test"), comp(2, "test", 50)], {1: None, 2: Decimal("40")}, 100, 0)
    assert result.test_avg == Decimal("80")


def test_missing_average_counts_as_zero_in_weighted_sum():
    result = compute_ca([comp(1, "test"), comp(2, "mock")], {1: Decimal("90")}, 40, 60)

    assert result.mock_avg is None
    assert result.theory_ca == Decimal("36")
    assert result.theory_pass is False
    assert result.overall is OverallCompetency.NOT_YET_COMPETENT


def test_unmarked_practical_fails_even_when_theory_passes():
    components = [comp(1, "test"), comp(2, "practical"), comp(3, "practical", 20)]
    marks = {1: Decimal("75"), 2: Decimal("65")}

    result = compute_ca(components, marks, 100, 0)

    assert result.theory_pass is True
    assert [p.passed for p in result.practicals] == [True, False]
    assert result.all_practicals_pass is False
    assert result.overall is OverallCompetency.NOT_YET_COMPETENT


def test_practical_pass_mark_is_inclusive():
    result = compute_ca([comp(1, "test"), comp(2, "practical", 20)], {1: Decimal("50"), 2: Decimal("12")}, 100, 0)
    assert result.theory_pass is True
    assert result.practicals[0].passed is True
    assert result.overall is OverallCompetency.COMPETENT


def test_assignments_and_projects_do_not_count():
    components = [comp(1, "assignment"), comp(2, "project")]
    result = compute_ca(components, {1: Decimal("100"), 2: Decimal("100")}, 40, 60)
    assert result.theory_ca is None
    assert result.overall is OverallCompetency.PENDING


def test_weights_need_not_sum_to_100():
    result = compute_ca([comp(1, "test"), comp(2, "mock")], {1: Decimal("50"), 2: Decimal("50")}, 50, 30)
    assert result.theory_ca == Decimal("40")
    assert result.theory_pass is False


def test_same_input_gives_identical_output():
    components = [comp(1, "test", 30), comp(2, "mock", 70), comp(3, "practical", 15)]
    marks = {1: Decimal("17"), 2: Decimal("41.5"), 3: Decimal("11")}

    first = json.dumps(compute_ca(components, marks, 40, 60).as_dict(), sort_keys=True)
    second = json.dumps(compute_ca(components, marks, 40, 60).as_dict(), sort_keys=True)

    assert first == second


def test_as_dict_rounds_for_display():
    result = compute_ca([comp(1, "test", 3)], {1: Decimal("2")}, 100, 0)
    data = result.as_dict()
    assert data["test_avg"] == 66.67
    assert data["overall"] == "Competent"


@pytest.mark.django_db
def test_bulk_and_single_trainee_agree(gradebook, enrolled, components, trainer_actor):
    first, second = enrolled
    services.save_mark(trainer_actor, gradebook.pk, components[0].pk, first.pk, "80")
    services.save_mark(trainer_actor, gradebook.pk, components[2].pk, first.pk, "45")
    services.save_mark(trainer_actor, gradebook.pk, components[3].pk, second.pk, "19")

    bulk = aggregator.gradebook_ca(gradebook)

    assert set(bulk) == {first.pk, second.pk}
    for trainee in enrolled:
        single = aggregator.trainee_ca(gradebook, trainee.pk)
        assert json.dumps(single.as_dict(), sort_keys=True) == json.dumps(bulk[trainee.pk].as_dict(), sort_keys=True)


@pytest.mark.django_db
def test_every_enrolled_trainee_is_pending_without_marks(gradebook, enrolled, components):
    results = aggregator.gradebook_ca(gradebook)
    assert {r.overall for r in results.values()} == {OverallCompetency.PENDING}
