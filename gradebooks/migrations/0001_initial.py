import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models

COMPETENCY_CHOICES = [
    ("pending", "Pending"),
    ("competent", "Competent"),
    ("not_yet_competent", "Not Yet Competent"),
]


def _user_fk():
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name="+",
        to=settings.AUTH_USER_MODEL,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("trainees", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Gradebook",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("academic_year", models.CharField(max_length=16)),
                ("intake_label", models.CharField(blank=True, max_length=64)),
                ("level", models.PositiveSmallIntegerField(default=1)),
                ("title", models.CharField(max_length=200)),
                ("test_weight", models.DecimalField(decimal_places=2, default=Decimal("40"), max_digits=5)),
                ("mock_weight", models.DecimalField(decimal_places=2, default=Decimal("60"), max_digits=5)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("submitted", "Submitted"),
                            ("hot_approved", "HoT approved"),
                            ("ac_approved", "AC approved"),
                        ],
                        default="draft",
                        max_length=16,
                    ),
                ),
                ("is_locked", models.BooleanField(default=False)),
                ("locked_at", models.DateTimeField(blank=True, null=True)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("hot_approved_at", models.DateTimeField(blank=True, null=True)),
                ("ac_approved_at", models.DateTimeField(blank=True, null=True)),
                ("return_reason", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "qualification",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="gradebooks",
                        to="trainees.qualification",
                    ),
                ),
                (
                    "trainer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="gradebooks",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                ("submitted_by", _user_fk()),
                ("hot_approved_by", _user_fk()),
                ("ac_approved_by", _user_fk()),
            ],
            options={
                "ordering": ("-created_at", "-id"),
            },
        ),
        migrations.CreateModel(
            name="ComponentGroup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=128)),
                (
                    "group_type",
                    models.CharField(choices=[("theory", "Theory"), ("practical", "Practical")], max_length=16),
                ),
                ("sort_order", models.PositiveIntegerField(default=0)),
                (
                    "gradebook",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="groups",
                        to="gradebooks.gradebook",
                    ),
                ),
            ],
            options={
                "ordering": ("sort_order", "id"),
            },
        ),
        migrations.CreateModel(
            name="Component",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=128)),
                (
                    "component_type",
                    models.CharField(
                        choices=[
                            ("test", "Test"),
                            ("mock", "Mock"),
                            ("practical", "Practical"),
                            ("assignment", "Assignment"),
                            ("project", "Project"),
                        ],
                        max_length=16,
                    ),
                ),
                ("max_marks", models.DecimalField(decimal_places=2, max_digits=7)),
                ("template_component_ref", models.CharField(blank=True, max_length=64)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                (
                    "gradebook",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="components",
                        to="gradebooks.gradebook",
                    ),
                ),
                (
                    "group",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="components",
                        to="gradebooks.componentgroup",
                    ),
                ),
            ],
            options={
                "ordering": ("sort_order", "id"),
            },
        ),
        migrations.CreateModel(
            name="GradebookTrainee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("enrolled_at", models.DateTimeField(auto_now_add=True)),
                (
                    "gradebook",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="enrollments",
                        to="gradebooks.gradebook",
                    ),
                ),
                (
                    "trainee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="gradebook_enrollments",
                        to="trainees.trainee",
                    ),
                ),
            ],
            options={
                "unique_together": {("gradebook", "trainee")},
            },
        ),
        migrations.CreateModel(
            name="Mark",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("marks_obtained", models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True)),
                (
                    "competency_status",
                    models.CharField(choices=COMPETENCY_CHOICES, default="pending", max_length=24),
                ),
                ("entered_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "component",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="marks",
                        to="gradebooks.component",
                    ),
                ),
                ("entered_by", _user_fk()),
                (
                    "gradebook",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="marks",
                        to="gradebooks.gradebook",
                    ),
                ),
                (
                    "trainee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="marks",
                        to="trainees.trainee",
                    ),
                ),
            ],
            options={
                "unique_together": {("component", "trainee")},
            },
        ),
        migrations.CreateModel(
            name="Feedback",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("feedback_text", models.TextField()),
                ("is_final", models.BooleanField(default=False)),
                ("written_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "component",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="feedback",
                        to="gradebooks.component",
                    ),
                ),
                (
                    "gradebook",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="feedback",
                        to="gradebooks.gradebook",
                    ),
                ),
                (
                    "trainee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="feedback",
                        to="trainees.trainee",
                    ),
                ),
                ("written_by", _user_fk()),
            ],
            options={
                "unique_together": {("component", "trainee")},
            },
        ),
    ]
