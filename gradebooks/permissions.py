import logging
from dataclasses import dataclass

from accounts.models import User
from .exceptions import PermissionDeniedError

logger = logging.getLogger(__name__)

Role = User.Role

STAFF_REVIEWER_ROLES = frozenset({Role.TRAINER, Role.HEAD_OF_TRAINING, Role.ASSESSMENT_COORDINATOR, Role.ADMIN})


@dataclass(frozen=True)
class ActorContext:
    """Who is performing a mutation; passed explicitly to every operation."""

    user_id: int
    role: str

    @property
    def is_trainer(self) -> bool:
        return self.role == Role.TRAINER

    @property
    def is_hot(self) -> bool:
        return self.role == Role.HEAD_OF_TRAINING

    @property
    def is_ac(self) -> bool:
        return self.role == Role.ASSESSMENT_COORDINATOR

    @property
    def is_trainee(self) -> bool:
        return self.role == Role.TRAINEE

    @property
    def is_staff_reviewer(self) -> bool:
        return self.role in STAFF_REVIEWER_ROLES


def actor_from_user(user) -> ActorContext:
    if not getattr(user, "is_authenticated", False):
        raise PermissionDeniedError("authentication required")
    return ActorContext(user_id=user.pk, role=user.role)


def actor_from_request(request) -> ActorContext:
    return actor_from_user(request.user)


def require_role(actor: ActorContext, *roles, action: str = "perform this action"):
    if actor.role not in roles:
        logger.warning("Permission denied: user %s (%s) may not %s", actor.user_id, actor.role, action)
        raise PermissionDeniedError(f"role '{actor.role}' may not {action}")
