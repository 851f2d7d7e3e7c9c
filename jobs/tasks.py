import logging

from django_rq import job

from gradebooks.models import Gradebook, GradebookStatus
from gradebooks.roster import reconcile_roster

logger = logging.getLogger(__name__)


@job("default")
def reconcile_roster_job(gradebook_id: int):
    return reconcile_roster(gradebook_id)


@job("default")
def sweep_empty_rosters():
    """Queue a roster batch for every draft gradebook that has nobody enrolled."""
    ids = list(
        Gradebook.objects.filter(status=GradebookStatus.DRAFT, enrollments__isnull=True)
        .values_list("id", flat=True)
        .distinct()
    )
    for gradebook_id in ids:
        reconcile_roster_job.delay(gradebook_id)
    logger.info("Queued roster batches for %s gradebook(s)", len(ids))
    return len(ids)
