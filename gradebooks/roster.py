import logging

from django.conf import settings
from django.core.cache import cache
from django.db import transaction

from trainees.lookup import find_matching_trainees
from .models import Gradebook, GradebookTrainee

logger = logging.getLogger(__name__)


def _inflight_key(gradebook_id) -> str:
    return f"roster:inflight:{gradebook_id}"


def reconcile_roster(gradebook) -> int:
    """
    Enroll every trainee matching the gradebook's qualification (and
    level) when the gradebook has no trainees yet. Returns the number
    enrolled; 0 when trainees are already enrolled, nobody matches, or
    another batch for the same gradebook is still running.
    """
    if isinstance(gradebook, int):
        gradebook = Gradebook.objects.select_related("qualification").filter(pk=gradebook).first()
        if gradebook is None:
            return 0
    if gradebook.enrollments.exists():
        return 0

    key = _inflight_key(gradebook.pk)
    ttl = getattr(settings, "ROSTER_INFLIGHT_TTL_SECONDS", 300)
    if not cache.add(key, 1, ttl):
        logger.info("Roster batch already in flight for gradebook %s; skipping", gradebook.pk)
        return 0
    try:
        with transaction.atomic():
            # Re-check under the marker: a batch may have finished meanwhile.
            if gradebook.enrollments.exists():
                return 0
            trainee_ids = list(
                find_matching_trainees(gradebook.qualification, gradebook.level).values_list("id", flat=True)
            )
            if not trainee_ids:
                return 0
            GradebookTrainee.objects.bulk_create(
                [GradebookTrainee(gradebook=gradebook, trainee_id=tid) for tid in trainee_ids],
                ignore_conflicts=True,
            )
        logger.info("Roster batch enrolled %s trainee(s) in gradebook %s", len(trainee_ids), gradebook.pk)
        return len(trainee_ids)
    finally:
        cache.delete(key)
