"""
Gradebook approval workflow.

    draft -> submitted -> hot_approved -> ac_approved
    submitted -> draft          (HoT returns to trainer)
    hot_approved -> submitted   (AC returns to HoT)

Each transition is one conditional UPDATE on the expected current status,
so two concurrent actors cannot both move the same gradebook.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from django.db import transaction
from django.utils import timezone

from accounts.models import User
from .exceptions import ConflictError, NotFoundError, PermissionDeniedError, StateError
from .models import Gradebook, GradebookStatus
from .permissions import ActorContext, require_role

logger = logging.getLogger(__name__)

Role = User.Role


@dataclass(frozen=True)
class Transition:
    name: str
    role: str
    source: Tuple[str, ...]
    target: str
    updates: Callable[[ActorContext, str], Dict]
    # Only the gradebook's own trainer may take this step.
    owner_only: bool = False


def _submitted(actor, reason):
    return {"submitted_at": timezone.now(), "submitted_by_id": actor.user_id, "return_reason": ""}


def _hot_approved(actor, reason):
    return {"hot_approved_at": timezone.now(), "hot_approved_by_id": actor.user_id}


def _ac_approved(actor, reason):
    return {"ac_approved_at": timezone.now(), "ac_approved_by_id": actor.user_id}


def _returned_to_draft(actor, reason):
    return {"submitted_at": None, "submitted_by_id": None, "return_reason": reason or ""}


def _returned_to_submitted(actor, reason):
    return {"hot_approved_at": None, "hot_approved_by_id": None, "return_reason": reason or ""}


TRANSITIONS = {
    t.name: t
    for t in (
        Transition(
            "submit", Role.TRAINER, (GradebookStatus.DRAFT,),
            GradebookStatus.SUBMITTED, _submitted, owner_only=True,
        ),
        Transition(
            "hot_approve", Role.HEAD_OF_TRAINING, (GradebookStatus.SUBMITTED,),
            GradebookStatus.HOT_APPROVED, _hot_approved,
        ),
        Transition(
            "return_to_draft", Role.HEAD_OF_TRAINING, (GradebookStatus.SUBMITTED,),
            GradebookStatus.DRAFT, _returned_to_draft,
        ),
        Transition(
            "ac_approve", Role.ASSESSMENT_COORDINATOR, (GradebookStatus.HOT_APPROVED,),
            GradebookStatus.AC_APPROVED, _ac_approved,
        ),
        Transition(
            "return_to_submitted", Role.ASSESSMENT_COORDINATOR, (GradebookStatus.HOT_APPROVED,),
            GradebookStatus.SUBMITTED, _returned_to_submitted,
        ),
    )
}


def is_owner(actor: ActorContext, gradebook: Gradebook) -> bool:
    return actor.is_trainer and gradebook.trainer_id == actor.user_id


def can_enter_marks(actor: ActorContext, gradebook: Gradebook) -> bool:
    # A locked gradebook stays editable after submission; an unlocked one does not.
    return is_owner(actor, gradebook) and (gradebook.status == GradebookStatus.DRAFT or gradebook.is_locked)


def can_change_structure(actor: ActorContext, gradebook: Gradebook) -> bool:
    return is_owner(actor, gradebook) and (gradebook.status == GradebookStatus.DRAFT or gradebook.is_locked)


def available_actions(actor: ActorContext, gradebook: Gradebook):
    return sorted(
        name
        for name, t in TRANSITIONS.items()
        if actor.role == t.role
        and gradebook.status in t.source
        and (not t.owner_only or gradebook.trainer_id == actor.user_id)
    )


def apply_transition(gradebook_id, name: str, actor: ActorContext, reason: str = "") -> Gradebook:
    try:
        t = TRANSITIONS[name]
    except KeyError:
        raise StateError(f"unknown transition '{name}'")
    require_role(actor, t.role, action=name.replace("_", " "))

    match = {"pk": gradebook_id, "status__in": t.source}
    if t.owner_only:
        match["trainer_id"] = actor.user_id
    with transaction.atomic():
        rows = Gradebook.objects.filter(**match).update(
            status=t.target, updated_at=timezone.now(), **t.updates(actor, reason)
        )
        if rows != 1:
            current = Gradebook.objects.filter(pk=gradebook_id).values("status", "trainer_id").first()
            if current is None:
                raise NotFoundError(f"gradebook {gradebook_id} not found")
            if t.owner_only and current["trainer_id"] != actor.user_id:
                logger.warning("Rejected %s on gradebook %s: user %s is not its trainer", name, gradebook_id, actor.user_id)
                raise PermissionDeniedError(f"only the gradebook's own trainer may {name.replace('_', ' ')}")
            logger.warning("Rejected %s on gradebook %s: status is %s", name, gradebook_id, current["status"])
            raise ConflictError(f"cannot {name.replace('_', ' ')} a gradebook in status '{current['status']}'")

    logger.info("Gradebook %s: %s by user %s -> %s", gradebook_id, name, actor.user_id, t.target)
    return Gradebook.objects.get(pk=gradebook_id)


def submit(gradebook_id, actor: ActorContext) -> Gradebook:
    return apply_transition(gradebook_id, "submit", actor)


def hot_approve(gradebook_id, actor: ActorContext) -> Gradebook:
    return apply_transition(gradebook_id, "hot_approve", actor)


def return_to_draft(gradebook_id, actor: ActorContext, reason: str = "") -> Gradebook:
    return apply_transition(gradebook_id, "return_to_draft", actor, reason)


def ac_approve(gradebook_id, actor: ActorContext) -> Gradebook:
    return apply_transition(gradebook_id, "ac_approve", actor)


def return_to_submitted(gradebook_id, actor: ActorContext, reason: str = "") -> Gradebook:
    return apply_transition(gradebook_id, "return_to_submitted", actor, reason)
