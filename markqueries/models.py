from django.conf import settings
from django.db import models


class QueryStatus(models.TextChoices):
    OPEN = "open", "Open"
    RESOLVED = "resolved", "Resolved"
    REJECTED = "rejected", "Rejected"


class QueryType(models.TextChoices):
    INCORRECT_MARK = "incorrect_mark", "Incorrect mark"
    MISSING_MARK = "missing_mark", "Missing mark"
    CALCULATION = "calculation", "Calculation error"
    COMPETENCY = "competency", "Competency status"
    OTHER = "other", "Other"


class MarkQuery(models.Model):
    gradebook = models.ForeignKey("gradebooks.Gradebook", on_delete=models.CASCADE, related_name="mark_queries")
    component = models.ForeignKey("gradebooks.Component", on_delete=models.CASCADE, related_name="mark_queries")
    trainee = models.ForeignKey("trainees.Trainee", on_delete=models.CASCADE, related_name="mark_queries")
    query_type = models.CharField(max_length=32, choices=QueryType.choices, default=QueryType.OTHER)
    subject = models.CharField(max_length=200)
    description = models.TextField()
    status = models.CharField(max_length=16, choices=QueryStatus.choices, default=QueryStatus.OPEN)
    resolution_notes = models.TextField(blank=True)
    raised_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")

    @property
    def is_terminal(self):
        return self.status != QueryStatus.OPEN
