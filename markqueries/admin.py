from django.contrib import admin
from .models import MarkQuery


@admin.register(MarkQuery)
class MarkQueryAdmin(admin.ModelAdmin):
    list_display = ("id", "gradebook", "component", "trainee", "query_type", "status", "created_at")
    list_filter = ("status", "query_type")
    search_fields = ("subject", "trainee__trainee_number", "trainee__last_name")
    readonly_fields = ("resolved_by", "resolved_at", "created_at", "updated_at")
