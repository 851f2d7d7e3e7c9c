"""
Org-wide gradebook health report: workflow stalls and data that does not
line up (empty rosters, marks for trainees who are not enrolled, open
mark queries).
"""
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Dict, List

from django.conf import settings
from django.db.models import Count, Exists, OuterRef, Q
from django.utils import timezone

from markqueries.models import MarkQuery, QueryStatus
from .models import Gradebook, GradebookStatus, GradebookTrainee, Mark

IN_REVIEW = (GradebookStatus.SUBMITTED, GradebookStatus.HOT_APPROVED)
# No status follows AC approval; it is never stalled.
TERMINAL = GradebookStatus.AC_APPROVED


@dataclass(frozen=True)
class AuditIssue:
    type: str
    severity: str
    gradebook_id: int
    gradebook_title: str
    trainer_name: str
    status: str
    detail: str


def audit_gradebooks(now=None, stale_days=None) -> Dict[str, object]:
    now = now or timezone.now()
    if stale_days is None:
        stale_days = getattr(settings, "GRADEBOOK_STALE_DAYS", 14)

    enrolled = GradebookTrainee.objects.filter(gradebook_id=OuterRef("gradebook_id"), trainee_id=OuterRef("trainee_id"))
    orphaned = Counter(
        Mark.objects.annotate(is_enrolled=Exists(enrolled))
        .filter(is_enrolled=False)
        .values_list("gradebook_id", flat=True)
    )
    gradebooks = (
        Gradebook.objects.select_related("trainer")
        .annotate(
            trainee_count=Count("enrollments", distinct=True),
            open_queries=Count("mark_queries", filter=Q(mark_queries__status=QueryStatus.OPEN), distinct=True),
        )
        .order_by("-updated_at", "-id")
    )

    issues: List[AuditIssue] = []
    summary = {"total": 0, **{s: 0 for s in GradebookStatus.values}}
    for gb in gradebooks:
        summary["total"] += 1
        summary[gb.status] = summary.get(gb.status, 0) + 1
        base = {
            "gradebook_id": gb.pk,
            "gradebook_title": gb.title,
            "trainer_name": gb.trainer.get_full_name() or gb.trainer.email,
            "status": gb.status,
        }
        if gb.trainee_count == 0 and gb.status != GradebookStatus.DRAFT:
            issues.append(AuditIssue("empty_gradebook", "error", detail="Non-draft gradebook has 0 trainees enrolled.", **base))
        if orphaned.get(gb.pk):
            issues.append(AuditIssue(
                "orphaned_marks", "warning",
                detail=f"{orphaned[gb.pk]} mark(s) recorded for trainees not enrolled in this gradebook.", **base,
            ))
        if gb.status in IN_REVIEW:
            days = (now - gb.updated_at).days
            if days > stale_days:
                label = gb.status.replace("_", " ")
                issues.append(AuditIssue(
                    "stalled_workflow", "warning", detail=f'Status "{label}" unchanged for {days} days.', **base,
                ))
        if gb.open_queries and gb.status == TERMINAL:
            issues.append(AuditIssue(
                "unresolved_queries", "error",
                detail=f"{gb.open_queries} open mark query/queries on an AC-approved gradebook.", **base,
            ))
        elif gb.open_queries:
            issues.append(AuditIssue(
                "unresolved_queries", "info",
                detail=f"{gb.open_queries} open mark query/queries pending resolution.", **base,
            ))

    return {"issues": [asdict(i) for i in issues], "summary": summary}


def open_query_count(gradebook) -> int:
    return MarkQuery.objects.filter(gradebook=gradebook, status=QueryStatus.OPEN).count()
