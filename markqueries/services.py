import logging

from django.db import transaction
from django.utils import timezone

from gradebooks.exceptions import NotFoundError, PermissionDeniedError, StateError, ValidationError
from gradebooks.models import GradebookTrainee
from gradebooks.permissions import ActorContext
from gradebooks.services import get_gradebook
from trainees.models import Trainee
from .models import MarkQuery, QueryStatus, QueryType

logger = logging.getLogger(__name__)

OUTCOMES = (QueryStatus.RESOLVED, QueryStatus.REJECTED)


def raise_query(actor: ActorContext, gradebook_id, component_id, trainee_id, query_type, subject, description) -> MarkQuery:
    """A trainee disputes one of their own marks. Marks and CA are untouched."""
    if not actor.is_trainee:
        raise PermissionDeniedError("only trainees can raise mark queries")
    trainee = Trainee.objects.filter(pk=trainee_id).first()
    if trainee is None:
        raise NotFoundError(f"trainee {trainee_id} not found")
    if trainee.user_id != actor.user_id:
        raise PermissionDeniedError("trainees can only query their own marks")
    subject = (subject or "").strip()
    description = (description or "").strip()
    if not subject or not description:
        raise ValidationError("subject and description required")
    query_type = query_type or QueryType.OTHER
    if query_type not in QueryType.values:
        raise ValidationError(f"unknown query type '{query_type}'")

    gb = get_gradebook(gradebook_id)
    component = gb.components.filter(pk=component_id).first()
    if component is None:
        raise NotFoundError(f"component {component_id} not found in gradebook {gb.pk}")
    if not GradebookTrainee.objects.filter(gradebook=gb, trainee=trainee).exists():
        raise NotFoundError(f"trainee {trainee.pk} is not enrolled in gradebook {gb.pk}")

    mq = MarkQuery.objects.create(
        gradebook=gb,
        component=component,
        trainee=trainee,
        query_type=query_type,
        subject=subject,
        description=description,
        raised_by_id=actor.user_id,
    )
    logger.info("Mark query %s raised on gradebook %s component %s", mq.pk, gb.pk, component.pk)
    return mq


def resolve_query(actor: ActorContext, query_id, outcome, notes) -> MarkQuery:
    if not actor.is_staff_reviewer:
        raise PermissionDeniedError("only staff can resolve mark queries")
    if outcome not in OUTCOMES:
        raise ValidationError("outcome must be 'resolved' or 'rejected'")
    notes = (notes or "").strip()
    if not notes:
        raise ValidationError("resolution notes are required")
    now = timezone.now()
    with transaction.atomic():
        rows = MarkQuery.objects.filter(pk=query_id, status=QueryStatus.OPEN).update(
            status=outcome,
            resolution_notes=notes,
            resolved_by_id=actor.user_id,
            resolved_at=now,
            updated_at=now,
        )
        if rows != 1:
            current = MarkQuery.objects.filter(pk=query_id).values_list("status", flat=True).first()
            if current is None:
                raise NotFoundError(f"mark query {query_id} not found")
            raise StateError(f"mark query {query_id} is already {current}")
    logger.info("Mark query %s %s by user %s", query_id, outcome, actor.user_id)
    return MarkQuery.objects.get(pk=query_id)


def list_for_gradebook(gradebook_id):
    gb = get_gradebook(gradebook_id)
    return MarkQuery.objects.filter(gradebook=gb).select_related("component", "trainee")


def list_for_trainee(trainee):
    return MarkQuery.objects.filter(trainee=trainee).select_related("component", "gradebook")
