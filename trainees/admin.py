from django.contrib import admin
from .models import Qualification, Trainee


@admin.register(Qualification)
class QualificationAdmin(admin.ModelAdmin):
    search_fields = ("code", "title", "trade")
    list_display = ("code", "title", "trade", "nqf_level")


@admin.register(Trainee)
class TraineeAdmin(admin.ModelAdmin):
    search_fields = ("trainee_number", "first_name", "last_name")
    list_display = ("trainee_number", "first_name", "last_name", "qualification", "level", "status")
    list_filter = ("status", "qualification")
