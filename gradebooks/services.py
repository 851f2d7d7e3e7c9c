import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from trainees.models import Qualification, Trainee
from .exceptions import LockedError, NotFoundError, PermissionDeniedError, StateError, ValidationError
from .lifecycle import can_change_structure, can_enter_marks
from .models import (
    CompetencyStatus,
    Component,
    ComponentGroup,
    ComponentType,
    Feedback,
    Gradebook,
    GradebookStatus,
    GradebookTrainee,
    GroupType,
    Mark,
)
from .permissions import ActorContext, Role, require_role

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "academic_year", "intake_label", "level", "test_weight", "mock_weight")


def _decimal(value, label):
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{label} must be a number")
    # NaN and Infinity parse but cannot be compared or stored.
    if not value.is_finite():
        raise ValidationError(f"{label} must be a number")
    return value


def _int(value, label):
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a whole number")


def _optional_decimal(value, label):
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _decimal(value, label)


def _require_owner(actor: ActorContext, gb: Gradebook, action: str):
    if actor.is_trainer and gb.trainer_id != actor.user_id:
        logger.warning("Permission denied: user %s may not %s on gradebook %s", actor.user_id, action, gb.pk)
        raise PermissionDeniedError(f"only the gradebook's own trainer may {action}")


def get_gradebook(gradebook_id, for_update=False) -> Gradebook:
    qs = Gradebook.objects.select_related("qualification", "trainer")
    if for_update:
        qs = qs.select_for_update()
    gb = qs.filter(pk=gradebook_id).first()
    if gb is None:
        raise NotFoundError(f"gradebook {gradebook_id} not found")
    return gb


def list_gradebooks(actor: ActorContext, status=None):
    qs = Gradebook.objects.select_related("qualification", "trainer")
    if actor.is_trainer:
        qs = qs.filter(trainer_id=actor.user_id)
    elif actor.is_trainee:
        qs = qs.filter(enrollments__trainee__user_id=actor.user_id)
    if status:
        if status not in GradebookStatus.values:
            raise ValidationError(f"unknown status '{status}'")
        qs = qs.filter(status=status)
    return qs.order_by("-updated_at", "-id")


def create_gradebook(
    actor: ActorContext,
    qualification_id,
    title,
    academic_year,
    level=1,
    test_weight=Decimal("40"),
    mock_weight=Decimal("60"),
    intake_label="",
) -> Gradebook:
    require_role(actor, Role.TRAINER, action="create a gradebook")
    title = (title or "").strip()
    if not title:
        raise ValidationError("title is required")
    if not academic_year:
        raise ValidationError("academic_year is required")
    qualification = Qualification.objects.filter(pk=qualification_id).first()
    if qualification is None:
        raise NotFoundError(f"qualification {qualification_id} not found")
    gb = Gradebook.objects.create(
        qualification=qualification,
        trainer_id=actor.user_id,
        title=title,
        academic_year=str(academic_year),
        level=_int(level, "level"),
        test_weight=_decimal(test_weight, "test_weight"),
        mock_weight=_decimal(mock_weight, "mock_weight"),
        intake_label=intake_label or "",
    )
    logger.info("Gradebook %s created by user %s", gb.pk, actor.user_id)
    return gb


def update_gradebook(actor: ActorContext, gradebook_id, **fields) -> Gradebook:
    require_role(actor, Role.TRAINER, action="edit a gradebook")
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"cannot edit fields: {', '.join(sorted(unknown))}")
    with transaction.atomic():
        gb = get_gradebook(gradebook_id, for_update=True)
        _require_owner(actor, gb, "edit this gradebook")
        if gb.is_locked:
            raise LockedError("gradebook settings cannot change once marks are recorded")
        if gb.status != GradebookStatus.DRAFT:
            raise StateError("only draft gradebooks can be edited")
        if "title" in fields:
            fields["title"] = (fields["title"] or "").strip()
            if not fields["title"]:
                raise ValidationError("title is required")
        for name in ("test_weight", "mock_weight"):
            if name in fields:
                fields[name] = _decimal(fields[name], name)
        if "level" in fields:
            fields["level"] = _int(fields["level"], "level")
        for name, value in fields.items():
            setattr(gb, name, value)
        gb.save(update_fields=[*fields, "updated_at"])
    return gb


def create_group(actor: ActorContext, gradebook_id, name, group_type) -> ComponentGroup:
    gb = get_gradebook(gradebook_id)
    _require_owner(actor, gb, "change this gradebook's structure")
    if not can_change_structure(actor, gb):
        raise StateError("component groups can only be added by the trainer while the gradebook is editable")
    name = (name or "").strip()
    if not name:
        raise ValidationError("group name is required")
    if group_type not in GroupType.values:
        raise ValidationError(f"unknown group type '{group_type}'")
    last = gb.groups.aggregate(m=Max("sort_order"))["m"] or 0
    return ComponentGroup.objects.create(gradebook=gb, name=name, group_type=group_type, sort_order=last + 1)


def add_component(
    actor: ActorContext,
    gradebook_id,
    name,
    component_type,
    max_marks,
    group_id=None,
    template_component_ref="",
) -> Component:
    name = (name or "").strip()
    if not name:
        raise ValidationError("component name is required")
    if component_type not in ComponentType.values:
        raise ValidationError(f"unknown component type '{component_type}'")
    max_marks = _decimal(max_marks, "max_marks")
    if max_marks <= 0:
        raise ValidationError("max_marks must be greater than zero")

    with transaction.atomic():
        gb = get_gradebook(gradebook_id, for_update=True)
        _require_owner(actor, gb, "change this gradebook's structure")
        if not can_change_structure(actor, gb):
            raise StateError("components can only be added by the trainer while the gradebook is draft or locked")
        group = None
        if group_id:
            group = gb.groups.filter(pk=group_id).first()
            if group is None:
                raise NotFoundError(f"component group {group_id} not found")
        last = gb.components.aggregate(m=Max("sort_order"))["m"] or 0
        component = Component.objects.create(
            gradebook=gb,
            group=group,
            name=name,
            component_type=component_type,
            max_marks=max_marks,
            template_component_ref=template_component_ref or "",
            sort_order=last + 1,
        )
    logger.info("Component %s added to gradebook %s", component.pk, gb.pk)
    return component


def delete_component(actor: ActorContext, component_id) -> None:
    with transaction.atomic():
        component = Component.objects.filter(pk=component_id).first()
        if component is None:
            raise NotFoundError(f"component {component_id} not found")
        gb = get_gradebook(component.gradebook_id, for_update=True)
        _require_owner(actor, gb, "change this gradebook's structure")
        # Gradebook-wide: any mark anywhere blocks every deletion.
        if gb.is_locked:
            logger.warning("Refused delete of component %s: gradebook %s is locked", component_id, gb.pk)
            raise LockedError("components cannot be removed once marking has begun")
        if not (actor.is_trainer and gb.status == GradebookStatus.DRAFT):
            raise StateError("components can only be removed by the trainer while the gradebook is draft")
        component.delete()
    logger.info("Component %s removed from gradebook %s", component_id, gb.pk)


def enroll_trainees(actor: ActorContext, gradebook_id, trainee_ids) -> int:
    require_role(actor, Role.TRAINER, Role.ADMIN, action="enroll trainees")
    try:
        ids = {int(t) for t in trainee_ids or []}
    except (TypeError, ValueError):
        raise ValidationError("trainee ids must be integers")
    if not ids:
        raise ValidationError("no trainees selected")
    with transaction.atomic():
        gb = get_gradebook(gradebook_id, for_update=True)
        _require_owner(actor, gb, "enroll trainees in this gradebook")
        found = set(Trainee.objects.filter(pk__in=ids).values_list("id", flat=True))
        missing = ids - found
        if missing:
            raise NotFoundError(f"trainee(s) not found: {', '.join(str(m) for m in sorted(missing))}")
        already = set(gb.enrollments.filter(trainee_id__in=ids).values_list("trainee_id", flat=True))
        GradebookTrainee.objects.bulk_create(
            [GradebookTrainee(gradebook=gb, trainee_id=tid) for tid in sorted(ids - already)],
            ignore_conflicts=True,
        )
    created = len(ids - already)
    logger.info("Enrolled %s trainee(s) in gradebook %s", created, gb.pk)
    return created


def _mark_entry_target(actor, gradebook_id, component_id, trainee_id):
    gb = get_gradebook(gradebook_id, for_update=True)
    _require_owner(actor, gb, "enter marks in this gradebook")
    if not can_enter_marks(actor, gb):
        if not actor.is_trainer:
            raise PermissionDeniedError("only the trainer can enter marks")
        raise StateError("gradebook is read-only for mark entry")
    component = gb.components.filter(pk=component_id).first()
    if component is None:
        raise NotFoundError(f"component {component_id} not found in gradebook {gb.pk}")
    if not gb.enrollments.filter(trainee_id=trainee_id).exists():
        raise NotFoundError(f"trainee {trainee_id} is not enrolled in gradebook {gb.pk}")
    return gb, component


def _upsert_feedback(actor, gb, component, trainee_id, feedback_text, is_final) -> Feedback:
    now = timezone.now()
    fb, _ = Feedback.objects.update_or_create(
        component=component,
        trainee_id=trainee_id,
        defaults={
            "gradebook": gb,
            "feedback_text": feedback_text,
            "is_final": bool(is_final),
            "written_by_id": actor.user_id,
            "written_at": now,
        },
    )
    return fb


def save_mark(
    actor: ActorContext,
    gradebook_id,
    component_id,
    trainee_id,
    marks_obtained=None,
    competency_status=CompetencyStatus.PENDING,
    feedback_text=None,
    is_final=False,
) -> Mark:
    """
    Upsert the mark for one (component, trainee) cell, and its feedback
    when text is given, as a single transaction. The first non-null mark
    anywhere in the gradebook locks its structure.
    """
    marks_obtained = _optional_decimal(marks_obtained, "marks_obtained")
    competency_status = competency_status or CompetencyStatus.PENDING
    if competency_status not in CompetencyStatus.values:
        raise ValidationError(f"unknown competency status '{competency_status}'")

    with transaction.atomic():
        gb, component = _mark_entry_target(actor, gradebook_id, component_id, trainee_id)
        if marks_obtained is not None:
            if marks_obtained < 0:
                raise ValidationError("marks_obtained cannot be negative")
            if marks_obtained > component.max_marks:
                raise ValidationError(f"marks_obtained cannot exceed {component.max_marks}")
        now = timezone.now()
        mark, _ = Mark.objects.update_or_create(
            component=component,
            trainee_id=trainee_id,
            defaults={
                "gradebook": gb,
                "marks_obtained": marks_obtained,
                "competency_status": competency_status,
                "entered_by_id": actor.user_id,
                "entered_at": now,
            },
        )
        if feedback_text:
            _upsert_feedback(actor, gb, component, trainee_id, feedback_text, is_final)
        if marks_obtained is not None and not gb.is_locked:
            Gradebook.objects.filter(pk=gb.pk, is_locked=False).update(
                is_locked=True, locked_at=now, updated_at=now
            )
            logger.info("Gradebook %s locked by first mark (component %s)", gb.pk, component.pk)
    return mark


def save_feedback(actor: ActorContext, gradebook_id, component_id, trainee_id, feedback_text, is_final=False) -> Feedback:
    feedback_text = (feedback_text or "").strip()
    if not feedback_text:
        raise ValidationError("feedback text is required")
    with transaction.atomic():
        gb, component = _mark_entry_target(actor, gradebook_id, component_id, trainee_id)
        return _upsert_feedback(actor, gb, component, trainee_id, feedback_text, is_final)
