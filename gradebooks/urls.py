from django.urls import path
from . import views

app_name = "gradebooks"

urlpatterns = [
    path("", views.gradebook_list, name="list"),
    path("audit/", views.audit, name="audit"),
    path("<int:gradebook_id>/", views.gradebook_detail, name="detail"),
    path("<int:gradebook_id>/update/", views.gradebook_update, name="update"),
    path("<int:gradebook_id>/groups/", views.groups, name="groups"),
    path("<int:gradebook_id>/components/", views.components, name="components"),
    path("components/<int:component_id>/delete/", views.component_delete, name="component_delete"),
    path("<int:gradebook_id>/trainees/", views.trainees, name="trainees"),
    path("<int:gradebook_id>/trainees/available/", views.available_trainees, name="available_trainees"),
    path("<int:gradebook_id>/marks/", views.marks, name="marks"),
    path("<int:gradebook_id>/feedback/", views.feedback, name="feedback"),
    path("<int:gradebook_id>/edits/", views.staged_edits, name="edits"),
    path("<int:gradebook_id>/edits/commit/", views.staged_edits_commit, name="edits_commit"),
    path("<int:gradebook_id>/edits/discard/", views.staged_edits_discard, name="edits_discard"),
    path("<int:gradebook_id>/ca/", views.ca_report, name="ca_report"),
    path("<int:gradebook_id>/ca/<int:trainee_id>/", views.ca_trainee, name="ca_trainee"),
    path("<int:gradebook_id>/transition/<slug:action>/", views.transition, name="transition"),
    path("<int:gradebook_id>/export/", views.export_assessor_sheet, name="export"),
]
