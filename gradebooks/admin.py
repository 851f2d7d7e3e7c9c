from django.contrib import admin
from .models import Component, ComponentGroup, Feedback, Gradebook, GradebookTrainee, Mark


class ComponentInline(admin.TabularInline):
    model = Component
    extra = 0
    fields = ("sort_order", "name", "component_type", "max_marks", "group")


@admin.register(Gradebook)
class GradebookAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "qualification", "trainer", "academic_year", "status", "is_locked", "updated_at")
    list_filter = ("status", "is_locked", "academic_year")
    search_fields = ("title", "qualification__code", "trainer__email")
    readonly_fields = (
        "status", "is_locked", "locked_at",
        "submitted_at", "submitted_by", "hot_approved_at", "hot_approved_by",
        "ac_approved_at", "ac_approved_by", "created_at", "updated_at",
    )
    inlines = [ComponentInline]


@admin.register(ComponentGroup)
class ComponentGroupAdmin(admin.ModelAdmin):
    list_display = ("gradebook", "name", "group_type", "sort_order")


@admin.register(GradebookTrainee)
class GradebookTraineeAdmin(admin.ModelAdmin):
    list_display = ("gradebook", "trainee", "enrolled_at")
    search_fields = ("trainee__trainee_number", "trainee__last_name")


@admin.register(Mark)
class MarkAdmin(admin.ModelAdmin):
    list_display = ("gradebook", "component", "trainee", "marks_obtained", "competency_status", "entered_at")
    list_filter = ("competency_status",)


@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):
    list_display = ("gradebook", "component", "trainee", "is_final", "written_at")
    list_filter = ("is_final",)
