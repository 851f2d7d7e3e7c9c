from datetime import timedelta

import pytest
from django.utils import timezone

from gradebooks import lifecycle
from gradebooks.audit import audit_gradebooks
from gradebooks.models import Gradebook, Mark
from markqueries import services as query_services
from trainees.models import Trainee

pytestmark = pytest.mark.django_db


def _types(report, gradebook):
    return {i["type"] for i in report["issues"] if i["gradebook_id"] == gradebook.pk}


def test_clean_draft_has_no_issues(gradebook, enrolled):
    report = audit_gradebooks()
    assert report["issues"] == []
    assert report["summary"]["total"] == 1
    assert report["summary"]["draft"] == 1


def test_empty_non_draft_gradebook(gradebook, trainer_actor):
    lifecycle.submit(gradebook.pk, trainer_actor)
    report = audit_gradebooks()

    assert _types(report, gradebook) == {"empty_gradebook"}
    issue = report["issues"][0]
    assert issue["severity"] == "error"
    assert issue["trainer_name"] == "Thandi Mokoena"
    assert report["summary"]["submitted"] == 1


def test_stalled_workflow(gradebook, enrolled, trainer_actor):
    lifecycle.submit(gradebook.pk, trainer_actor)
    Gradebook.objects.filter(pk=gradebook.pk).update(updated_at=timezone.now() - timedelta(days=30))

    report = audit_gradebooks(stale_days=14)

    assert _types(report, gradebook) == {"stalled_workflow"}
    assert "30 days" in report["issues"][0]["detail"]


def test_recent_submission_not_stalled(gradebook, enrolled, trainer_actor):
    lifecycle.submit(gradebook.pk, trainer_actor)
    assert audit_gradebooks(stale_days=14)["issues"] == []


def test_orphaned_marks(gradebook, enrolled, components):
    outsider = Trainee.objects.create(trainee_number="T404", first_name="No", last_name="Body")
    Mark.objects.create(gradebook=gradebook, component=components[0], trainee=outsider, marks_obtained=10)

    report = audit_gradebooks()

    assert _types(report, gradebook) == {"orphaned_marks"}
    assert report["issues"][0]["detail"].startswith("1 mark(s)")


def test_unresolved_queries(gradebook, enrolled, components, trainee_actor):
    query_services.raise_query(
        trainee_actor, gradebook.pk, components[0].pk, enrolled[0].pk, "missing_mark", "Test 1", "No mark shown",
    )
    report = audit_gradebooks()
    assert _types(report, gradebook) == {"unresolved_queries"}
    assert report["issues"][0]["severity"] == "info"


def _approve(gradebook, trainer_actor, hot_actor, ac_actor=None):
    lifecycle.submit(gradebook.pk, trainer_actor)
    lifecycle.hot_approve(gradebook.pk, hot_actor)
    if ac_actor is not None:
        lifecycle.ac_approve(gradebook.pk, ac_actor)


def test_stale_hot_approval_is_stalled(gradebook, enrolled, trainer_actor, hot_actor):
    _approve(gradebook, trainer_actor, hot_actor)
    report = audit_gradebooks(now=timezone.now() + timedelta(days=30), stale_days=14)
    assert _types(report, gradebook) == {"stalled_workflow"}
    assert 'Status "hot approved"' in report["issues"][0]["detail"]


def test_ac_approved_is_never_stalled(gradebook, enrolled, trainer_actor, hot_actor, ac_actor):
    _approve(gradebook, trainer_actor, hot_actor, ac_actor)
    report = audit_gradebooks(now=timezone.now() + timedelta(days=365), stale_days=14)
    assert report["issues"] == []
    assert report["summary"]["ac_approved"] == 1


def test_open_query_on_ac_approved_is_error(gradebook, enrolled, components, trainer_actor, hot_actor, ac_actor, trainee_actor):
    query_services.raise_query(
        trainee_actor, gradebook.pk, components[0].pk, enrolled[0].pk, "missing_mark", "Test 1", "No mark shown",
    )
    _approve(gradebook, trainer_actor, hot_actor, ac_actor)

    report = audit_gradebooks()

    assert _types(report, gradebook) == {"unresolved_queries"}
    assert report["issues"][0]["severity"] == "error"
    assert "AC-approved" in report["issues"][0]["detail"]
