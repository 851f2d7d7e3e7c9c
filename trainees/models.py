from django.db import models
from django.conf import settings


class Qualification(models.Model):
    code = models.CharField(max_length=32, unique=True)
    title = models.CharField(max_length=200)
    trade = models.CharField(max_length=128, blank=True)
    nqf_level = models.PositiveSmallIntegerField(null=True, blank=True)

    def __str__(self):
        return f"{self.code} {self.title}"


class Trainee(models.Model):
    STATUS_CHOICES = [("active", "Active"), ("suspended", "Suspended"), ("completed", "Completed")]
    trainee_number = models.CharField(max_length=64, unique=True)
    first_name = models.CharField(max_length=64)
    last_name = models.CharField(max_length=64)
    qualification = models.ForeignKey(
        Qualification, null=True, blank=True, on_delete=models.SET_NULL, related_name="trainees"
    )
    trade = models.CharField(max_length=128, blank=True)
    level = models.PositiveSmallIntegerField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="active")
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="trainee"
    )

    class Meta:
        ordering = ("last_name", "first_name", "id")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self):
        return f"{self.full_name} ({self.trainee_number})"
