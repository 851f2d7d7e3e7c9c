import pytest

from gradebooks import lifecycle, services
from gradebooks.exceptions import ConflictError, NotFoundError, PermissionDeniedError, StateError
from gradebooks.models import Gradebook, GradebookStatus

pytestmark = pytest.mark.django_db


def test_full_approval_path(gradebook, trainer_actor, hot_actor, ac_actor):
    gb = lifecycle.submit(gradebook.pk, trainer_actor)
    assert gb.status == GradebookStatus.SUBMITTED
    assert gb.submitted_at is not None
    assert gb.submitted_by_id == trainer_actor.user_id

    gb = lifecycle.hot_approve(gradebook.pk, hot_actor)
    assert gb.status == GradebookStatus.HOT_APPROVED
    assert gb.hot_approved_by_id == hot_actor.user_id

    gb = lifecycle.ac_approve(gradebook.pk, ac_actor)
    assert gb.status == GradebookStatus.AC_APPROVED
    assert gb.ac_approved_at is not None


def test_submit_fails_when_not_draft(gradebook, trainer_actor):
    lifecycle.submit(gradebook.pk, trainer_actor)
    with pytest.raises(ConflictError):
        lifecycle.submit(gradebook.pk, trainer_actor)


def test_submit_allowed_from_locked_draft(gradebook, enrolled, components, trainer_actor):
    services.save_mark(trainer_actor, gradebook.pk, components[0].pk, enrolled[0].pk, "50")
    gb = lifecycle.submit(gradebook.pk, trainer_actor)
    assert gb.status == GradebookStatus.SUBMITTED
    assert gb.is_locked is True


def test_hot_approve_requires_submitted(gradebook, hot_actor):
    with pytest.raises(StateError):
        lifecycle.hot_approve(gradebook.pk, hot_actor)
    assert Gradebook.objects.get(pk=gradebook.pk).status == GradebookStatus.DRAFT


def test_ac_approve_requires_hot_approved(gradebook, trainer_actor, ac_actor):
    lifecycle.submit(gradebook.pk, trainer_actor)
    with pytest.raises(ConflictError):
        lifecycle.ac_approve(gradebook.pk, ac_actor)


def test_return_to_draft_clears_submission(gradebook, trainer_actor, hot_actor):
    lifecycle.submit(gradebook.pk, trainer_actor)
    gb = lifecycle.return_to_draft(gradebook.pk, hot_actor, reason="Test 2 marks missing")

    assert gb.status == GradebookStatus.DRAFT
    assert gb.submitted_at is None
    assert gb.submitted_by_id is None
    assert gb.return_reason == "Test 2 marks missing"

    gb = lifecycle.submit(gradebook.pk, trainer_actor)
    assert gb.return_reason == ""


def test_return_to_submitted_clears_hot_approval(gradebook, trainer_actor, hot_actor, ac_actor):
    lifecycle.submit(gradebook.pk, trainer_actor)
    lifecycle.hot_approve(gradebook.pk, hot_actor)
    gb = lifecycle.return_to_submitted(gradebook.pk, ac_actor, reason="check mock weighting")

    assert gb.status == GradebookStatus.SUBMITTED
    assert gb.hot_approved_at is None
    assert gb.hot_approved_by_id is None


def test_wrong_role_is_denied(gradebook, trainer_actor, hot_actor):
    with pytest.raises(PermissionDeniedError):
        lifecycle.submit(gradebook.pk, hot_actor)
    lifecycle.submit(gradebook.pk, trainer_actor)
    with pytest.raises(PermissionDeniedError):
        lifecycle.hot_approve(gradebook.pk, trainer_actor)


def test_stale_status_is_rejected(gradebook, trainer_actor, hot_actor):
    stale = Gradebook.objects.get(pk=gradebook.pk)
    lifecycle.submit(gradebook.pk, trainer_actor)
    lifecycle.return_to_draft(gradebook.pk, hot_actor)
    lifecycle.submit(gradebook.pk, trainer_actor)
    lifecycle.hot_approve(gradebook.pk, hot_actor)

    # The caller still believes the gradebook is a draft.
    assert stale.status == GradebookStatus.DRAFT
    with pytest.raises(ConflictError):
        lifecycle.submit(stale.pk, trainer_actor)


def test_missing_gradebook(trainer_actor):
    with pytest.raises(NotFoundError):
        lifecycle.submit(999999, trainer_actor)


def test_unknown_transition(gradebook, trainer_actor):
    with pytest.raises(StateError):
        lifecycle.apply_transition(gradebook.pk, "finalise", trainer_actor)


def test_available_actions(gradebook, trainer_actor, hot_actor, ac_actor):
    assert lifecycle.available_actions(trainer_actor, gradebook) == ["submit"]
    assert lifecycle.available_actions(hot_actor, gradebook) == []

    gb = lifecycle.submit(gradebook.pk, trainer_actor)
    assert lifecycle.available_actions(hot_actor, gb) == ["hot_approve", "return_to_draft"]
    assert lifecycle.available_actions(ac_actor, gb) == []


def test_mark_entry_asymmetry(gradebook, enrolled, components, trainer_actor, hot_actor):
    assert lifecycle.can_enter_marks(trainer_actor, gradebook) is True
    assert lifecycle.can_enter_marks(hot_actor, gradebook) is False

    gb = lifecycle.submit(gradebook.pk, trainer_actor)
    assert lifecycle.can_enter_marks(trainer_actor, gb) is False

    gb.is_locked = True
    assert lifecycle.can_enter_marks(trainer_actor, gb) is True


def test_other_trainer_cannot_submit(gradebook, other_trainer_actor):
    with pytest.raises(PermissionDeniedError):
        lifecycle.submit(gradebook.pk, other_trainer_actor)
    assert Gradebook.objects.get(pk=gradebook.pk).status == GradebookStatus.DRAFT


def test_other_trainer_has_no_actions(gradebook, trainer_actor, other_trainer_actor):
    assert lifecycle.available_actions(other_trainer_actor, gradebook) == []
    assert lifecycle.can_enter_marks(other_trainer_actor, gradebook) is False
    assert lifecycle.can_change_structure(other_trainer_actor, gradebook) is False
    assert lifecycle.can_enter_marks(trainer_actor, gradebook) is True
