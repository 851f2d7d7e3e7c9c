from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from gradebooks.decorators import json_errors
from gradebooks.exceptions import PermissionDeniedError
from gradebooks.permissions import actor_from_request
from trainees.lookup import trainee_for_user
from . import services


def _query_dict(q):
    return {
        "id": q.id,
        "gradebook_id": q.gradebook_id,
        "component": {"id": q.component_id, "name": q.component.name},
        "trainee_id": q.trainee_id,
        "query_type": q.query_type,
        "subject": q.subject,
        "description": q.description,
        "status": q.status,
        "resolution_notes": q.resolution_notes,
        "resolved_at": q.resolved_at,
        "created_at": q.created_at,
    }


@login_required
@json_errors
@require_POST
def raise_query(request):
    actor = actor_from_request(request)
    trainee = trainee_for_user(request.user)
    if trainee is None:
        raise PermissionDeniedError("no trainee record is linked to this account")
    q = services.raise_query(
        actor,
        gradebook_id=request.POST.get("gradebook_id"),
        component_id=request.POST.get("component_id"),
        trainee_id=trainee.pk,
        query_type=request.POST.get("query_type"),
        subject=request.POST.get("subject"),
        description=request.POST.get("description"),
    )
    return JsonResponse({"ok": True, "query": _query_dict(q)}, status=201)


@login_required
@json_errors
@require_POST
def resolve_query(request, query_id):
    actor = actor_from_request(request)
    q = services.resolve_query(actor, query_id, request.POST.get("outcome"), request.POST.get("notes"))
    return JsonResponse({"ok": True, "query": _query_dict(q)})


@login_required
@json_errors
@require_GET
def gradebook_queries(request, gradebook_id):
    actor = actor_from_request(request)
    if not actor.is_staff_reviewer:
        raise PermissionDeniedError("staff access required")
    qs = services.list_for_gradebook(gradebook_id)
    status = request.GET.get("status")
    if status:
        qs = qs.filter(status=status)
    return JsonResponse({"ok": True, "queries": [_query_dict(q) for q in qs]})


@login_required
@json_errors
@require_GET
def my_queries(request):
    trainee = trainee_for_user(request.user)
    if trainee is None:
        return JsonResponse({"ok": True, "queries": []})
    return JsonResponse({"ok": True, "queries": [_query_dict(q) for q in services.list_for_trainee(trainee)]})
