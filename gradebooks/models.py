from decimal import Decimal

from django.conf import settings
from django.db import models


class GradebookStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    SUBMITTED = "submitted", "Submitted"
    HOT_APPROVED = "hot_approved", "HoT approved"
    AC_APPROVED = "ac_approved", "AC approved"


class ComponentType(models.TextChoices):
    TEST = "test", "Test"
    MOCK = "mock", "Mock"
    PRACTICAL = "practical", "Practical"
    ASSIGNMENT = "assignment", "Assignment"
    PROJECT = "project", "Project"


class GroupType(models.TextChoices):
    THEORY = "theory", "Theory"
    PRACTICAL = "practical", "Practical"


class CompetencyStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPETENT = "competent", "Competent"
    NOT_YET_COMPETENT = "not_yet_competent", "Not Yet Competent"


class Gradebook(models.Model):
    qualification = models.ForeignKey(
        "trainees.Qualification", on_delete=models.PROTECT, related_name="gradebooks"
    )
    trainer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="gradebooks"
    )
    academic_year = models.CharField(max_length=16)
    intake_label = models.CharField(max_length=64, blank=True)
    level = models.PositiveSmallIntegerField(default=1)
    title = models.CharField(max_length=200)
    # Percentages; not required to sum to 100.
    test_weight = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("40"))
    mock_weight = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("60"))
    status = models.CharField(
        max_length=16, choices=GradebookStatus.choices, default=GradebookStatus.DRAFT
    )
    is_locked = models.BooleanField(default=False)
    locked_at = models.DateTimeField(null=True, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    hot_approved_at = models.DateTimeField(null=True, blank=True)
    hot_approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    ac_approved_at = models.DateTimeField(null=True, blank=True)
    ac_approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    return_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self):
        return f"{self.title} ({self.academic_year})"


class ComponentGroup(models.Model):
    gradebook = models.ForeignKey(Gradebook, on_delete=models.CASCADE, related_name="groups")
    name = models.CharField(max_length=128)
    group_type = models.CharField(max_length=16, choices=GroupType.choices)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ("sort_order", "id")

    def __str__(self):
        return self.name


class Component(models.Model):
    gradebook = models.ForeignKey(Gradebook, on_delete=models.CASCADE, related_name="components")
    group = models.ForeignKey(
        ComponentGroup, null=True, blank=True, on_delete=models.SET_NULL, related_name="components"
    )
    name = models.CharField(max_length=128)
    component_type = models.CharField(max_length=16, choices=ComponentType.choices)
    max_marks = models.DecimalField(max_digits=7, decimal_places=2)
    # Curriculum-template component this one was created from, if any.
    template_component_ref = models.CharField(max_length=64, blank=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ("sort_order", "id")

    def __str__(self):
        return f"{self.name} (/{self.max_marks})"


class GradebookTrainee(models.Model):
    gradebook = models.ForeignKey(Gradebook, on_delete=models.CASCADE, related_name="enrollments")
    trainee = models.ForeignKey(
        "trainees.Trainee", on_delete=models.CASCADE, related_name="gradebook_enrollments"
    )
    enrolled_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [("gradebook", "trainee")]


class Mark(models.Model):
    gradebook = models.ForeignKey(Gradebook, on_delete=models.CASCADE, related_name="marks")
    component = models.ForeignKey(Component, on_delete=models.CASCADE, related_name="marks")
    trainee = models.ForeignKey("trainees.Trainee", on_delete=models.CASCADE, related_name="marks")
    marks_obtained = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    competency_status = models.CharField(
        max_length=24, choices=CompetencyStatus.choices, default=CompetencyStatus.PENDING
    )
    entered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    entered_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [("component", "trainee")]


class Feedback(models.Model):
    gradebook = models.ForeignKey(Gradebook, on_delete=models.CASCADE, related_name="feedback")
    component = models.ForeignKey(Component, on_delete=models.CASCADE, related_name="feedback")
    trainee = models.ForeignKey("trainees.Trainee", on_delete=models.CASCADE, related_name="feedback")
    feedback_text = models.TextField()
    is_final = models.BooleanField(default=False)
    written_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    written_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [("component", "trainee")]
