from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from trainees.lookup import find_matching_trainees, trainee_for_user
from . import aggregator, lifecycle, services
from .audit import audit_gradebooks, open_query_count
from .decorators import json_errors
from .exceptions import NotFoundError, PermissionDeniedError, ValidationError
from .export import assessor_csv, export_filename
from .models import Feedback, GradebookStatus, Mark
from .permissions import Role, actor_from_request, require_role
from .roster import reconcile_roster
from .staging import StagedEdits


def _gradebook_dict(gb):
    return {
        "id": gb.id,
        "title": gb.title,
        "qualification": {"id": gb.qualification_id, "code": gb.qualification.code, "title": gb.qualification.title},
        "trainer": {"id": gb.trainer_id, "name": gb.trainer.get_full_name() or gb.trainer.email},
        "academic_year": gb.academic_year,
        "intake_label": gb.intake_label,
        "level": gb.level,
        "test_weight": gb.test_weight,
        "mock_weight": gb.mock_weight,
        "status": gb.status,
        "is_locked": gb.is_locked,
        "locked_at": gb.locked_at,
        "submitted_at": gb.submitted_at,
        "hot_approved_at": gb.hot_approved_at,
        "ac_approved_at": gb.ac_approved_at,
        "return_reason": gb.return_reason,
        "updated_at": gb.updated_at,
    }


def _component_dict(c):
    return {
        "id": c.id,
        "name": c.name,
        "component_type": c.component_type,
        "max_marks": c.max_marks,
        "group_id": c.group_id,
        "template_component_ref": c.template_component_ref,
        "sort_order": c.sort_order,
    }


def _trainee_dict(t):
    return {
        "id": t.id,
        "trainee_number": t.trainee_number,
        "first_name": t.first_name,
        "last_name": t.last_name,
        "level": t.level,
    }


def _reviewer(request):
    actor = actor_from_request(request)
    if not actor.is_staff_reviewer:
        raise PermissionDeniedError("staff access required")
    return actor


@login_required
@json_errors
@require_http_methods(["GET", "POST"])
def gradebook_list(request):
    actor = actor_from_request(request)
    if request.method == "POST":
        gb = services.create_gradebook(
            actor,
            qualification_id=request.POST.get("qualification_id"),
            title=request.POST.get("title"),
            academic_year=request.POST.get("academic_year"),
            level=request.POST.get("level", 1),
            test_weight=request.POST.get("test_weight", "40"),
            mock_weight=request.POST.get("mock_weight", "60"),
            intake_label=request.POST.get("intake_label", ""),
        )
        return JsonResponse({"ok": True, "gradebook": _gradebook_dict(gb)}, status=201)
    gradebooks = services.list_gradebooks(actor, status=request.GET.get("status"))
    return JsonResponse({"ok": True, "gradebooks": [_gradebook_dict(gb) for gb in gradebooks]})


@login_required
@json_errors
@require_GET
def gradebook_detail(request, gradebook_id):
    actor = _reviewer(request)
    gb = services.get_gradebook(gradebook_id)
    enrolled_now = 0
    if lifecycle.is_owner(actor, gb) and gb.status == GradebookStatus.DRAFT:
        enrolled_now = reconcile_roster(gb)
    return JsonResponse(
        {
            "ok": True,
            "gradebook": _gradebook_dict(gb),
            "groups": [
                {"id": g.id, "name": g.name, "group_type": g.group_type, "sort_order": g.sort_order}
                for g in gb.groups.all()
            ],
            "components": [_component_dict(c) for c in gb.components.all()],
            "trainee_count": gb.enrollments.count(),
            "enrolled_now": enrolled_now,
            "open_queries": open_query_count(gb),
            "can_enter_marks": lifecycle.can_enter_marks(actor, gb),
            "actions": lifecycle.available_actions(actor, gb),
        }
    )


@login_required
@json_errors
@require_POST
def gradebook_update(request, gradebook_id):
    actor = actor_from_request(request)
    fields = {k: request.POST.get(k) for k in services.EDITABLE_FIELDS if k in request.POST}
    gb = services.update_gradebook(actor, gradebook_id, **fields)
    return JsonResponse({"ok": True, "gradebook": _gradebook_dict(gb)})


@login_required
@json_errors
@require_http_methods(["GET", "POST"])
def groups(request, gradebook_id):
    actor = _reviewer(request)
    if request.method == "POST":
        g = services.create_group(actor, gradebook_id, request.POST.get("name"), request.POST.get("group_type"))
        return JsonResponse({"ok": True, "group": {"id": g.id, "name": g.name, "group_type": g.group_type}}, status=201)
    gb = services.get_gradebook(gradebook_id)
    return JsonResponse(
        {"ok": True, "groups": [{"id": g.id, "name": g.name, "group_type": g.group_type} for g in gb.groups.all()]}
    )


@login_required
@json_errors
@require_http_methods(["GET", "POST"])
def components(request, gradebook_id):
    actor = _reviewer(request)
    if request.method == "POST":
        c = services.add_component(
            actor,
            gradebook_id,
            name=request.POST.get("name"),
            component_type=request.POST.get("component_type", "test"),
            max_marks=request.POST.get("max_marks", "100"),
            group_id=request.POST.get("group_id") or None,
            template_component_ref=request.POST.get("template_component_ref", ""),
        )
        return JsonResponse({"ok": True, "component": _component_dict(c)}, status=201)
    gb = services.get_gradebook(gradebook_id)
    return JsonResponse({"ok": True, "components": [_component_dict(c) for c in gb.components.all()]})


@login_required
@json_errors
@require_POST
def component_delete(request, component_id):
    services.delete_component(actor_from_request(request), component_id)
    return JsonResponse({"ok": True})


@login_required
@json_errors
@require_http_methods(["GET", "POST"])
def trainees(request, gradebook_id):
    actor = _reviewer(request)
    if request.method == "POST":
        created = services.enroll_trainees(actor, gradebook_id, request.POST.getlist("trainee_ids"))
        return JsonResponse({"ok": True, "enrolled": created})
    gb = services.get_gradebook(gradebook_id)
    enrollments = gb.enrollments.select_related("trainee").order_by("trainee__last_name", "trainee__first_name")
    return JsonResponse({"ok": True, "trainees": [_trainee_dict(e.trainee) for e in enrollments]})


@login_required
@json_errors
@require_GET
def available_trainees(request, gradebook_id):
    _reviewer(request)
    gb = services.get_gradebook(gradebook_id)
    enrolled = gb.enrollments.values_list("trainee_id", flat=True)
    qs = find_matching_trainees(gb.qualification, gb.level).exclude(id__in=enrolled)
    return JsonResponse({"ok": True, "trainees": [_trainee_dict(t) for t in qs]})


@login_required
@json_errors
@require_http_methods(["GET", "POST"])
def marks(request, gradebook_id):
    actor = _reviewer(request)
    if request.method == "POST":
        mark = services.save_mark(
            actor,
            gradebook_id,
            component_id=request.POST.get("component_id"),
            trainee_id=request.POST.get("trainee_id"),
            marks_obtained=request.POST.get("marks_obtained"),
            competency_status=request.POST.get("competency_status") or None,
            feedback_text=request.POST.get("feedback") or None,
            is_final=request.POST.get("is_final") in ("1", "true", "on"),
        )
        return JsonResponse({"ok": True, "mark": {"id": mark.id, "marks_obtained": mark.marks_obtained}})
    gb = services.get_gradebook(gradebook_id)
    rows = Mark.objects.filter(gradebook=gb).values(
        "component_id", "trainee_id", "marks_obtained", "competency_status", "entered_by_id", "entered_at"
    )
    return JsonResponse({"ok": True, "marks": list(rows)})


@login_required
@json_errors
@require_http_methods(["GET", "POST"])
def feedback(request, gradebook_id):
    actor = _reviewer(request)
    if request.method == "POST":
        fb = services.save_feedback(
            actor,
            gradebook_id,
            component_id=request.POST.get("component_id"),
            trainee_id=request.POST.get("trainee_id"),
            feedback_text=request.POST.get("feedback_text"),
            is_final=request.POST.get("is_final") in ("1", "true", "on"),
        )
        return JsonResponse({"ok": True, "feedback": {"id": fb.id, "is_final": fb.is_final}})
    gb = services.get_gradebook(gradebook_id)
    rows = Feedback.objects.filter(gradebook=gb).values(
        "component_id", "trainee_id", "feedback_text", "is_final", "written_by_id", "written_at"
    )
    return JsonResponse({"ok": True, "feedback": list(rows)})


@login_required
@json_errors
@require_GET
def ca_report(request, gradebook_id):
    _reviewer(request)
    gb = services.get_gradebook(gradebook_id)
    results = aggregator.gradebook_ca(gb)
    enrollments = gb.enrollments.select_related("trainee").order_by("trainee__last_name", "trainee__first_name")
    rows = [
        {"trainee": _trainee_dict(e.trainee), "ca": results[e.trainee_id].as_dict()}
        for e in enrollments
    ]
    return JsonResponse(
        {"ok": True, "test_weight": gb.test_weight, "mock_weight": gb.mock_weight, "rows": rows}
    )


@login_required
@json_errors
@require_GET
def ca_trainee(request, gradebook_id, trainee_id):
    actor = actor_from_request(request)
    if actor.is_trainee:
        own = trainee_for_user(request.user)
        if own is None or own.pk != trainee_id:
            raise PermissionDeniedError("trainees can only view their own results")
    elif not actor.is_staff_reviewer:
        raise PermissionDeniedError("staff access required")
    gb = services.get_gradebook(gradebook_id)
    if not gb.enrollments.filter(trainee_id=trainee_id).exists():
        raise NotFoundError(f"trainee {trainee_id} is not enrolled in gradebook {gb.pk}")
    return JsonResponse({"ok": True, "trainee_id": trainee_id, "ca": aggregator.trainee_ca(gb, trainee_id).as_dict()})


@login_required
@json_errors
@require_http_methods(["GET", "POST"])
def staged_edits(request, gradebook_id):
    _reviewer(request)
    staged = StagedEdits.from_session(request.session, gradebook_id)
    if request.method == "POST":
        component_id = request.POST.get("component_id")
        trainee_id = request.POST.get("trainee_id")
        if not (component_id and trainee_id):
            raise ValidationError("component_id and trainee_id required")
        staged.stage(
            component_id,
            trainee_id,
            marks=request.POST.get("marks"),
            competency=request.POST.get("competency"),
            feedback=request.POST.get("feedback"),
        )
        staged.save_to_session(request.session)
    return JsonResponse({"ok": True, "edits": staged.to_dict()})


@login_required
@json_errors
@require_POST
def staged_edits_commit(request, gradebook_id):
    actor = _reviewer(request)
    staged = StagedEdits.from_session(request.session, gradebook_id)
    key = request.POST.get("key")
    try:
        if key:
            staged.commit(key, actor)
            committed = 1
        else:
            committed = len(staged.commit_all(actor))
    finally:
        staged.save_to_session(request.session)
    return JsonResponse({"ok": True, "committed": committed, "edits": staged.to_dict()})


@login_required
@json_errors
@require_POST
def staged_edits_discard(request, gradebook_id):
    _reviewer(request)
    staged = StagedEdits.from_session(request.session, gradebook_id)
    key = request.POST.get("key")
    if not key:
        raise ValidationError("key required")
    staged.discard(key)
    staged.save_to_session(request.session)
    return JsonResponse({"ok": True, "edits": staged.to_dict()})


@login_required
@json_errors
@require_POST
def transition(request, gradebook_id, action):
    actor = actor_from_request(request)
    gb = lifecycle.apply_transition(gradebook_id, action, actor, reason=request.POST.get("reason", ""))
    return JsonResponse({"ok": True, "gradebook": _gradebook_dict(gb)})


@login_required
@json_errors
@require_GET
def export_assessor_sheet(request, gradebook_id):
    actor = actor_from_request(request)
    gb = services.get_gradebook(gradebook_id)
    content = assessor_csv(gb, actor)
    response = HttpResponse(content, content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="{export_filename(gb)}"'
    return response


@login_required
@json_errors
@require_GET
def audit(request):
    actor = actor_from_request(request)
    require_role(actor, Role.HEAD_OF_TRAINING, Role.ASSESSMENT_COORDINATOR, Role.ADMIN, action="view the gradebook audit")
    return JsonResponse({"ok": True, **audit_gradebooks()})
