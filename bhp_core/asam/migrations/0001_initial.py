import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("facilities", "0001_initial"),
        ("intakes", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ASAMAssessment",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("PENDING", "Submitted"),
                            ("APPROVED", "Approved"),
                            ("CONDITIONAL", "Conditionally approved"),
                            ("DENIED", "Denied"),
                        ],
                        db_index=True,
                        default="DRAFT",
                        max_length=16,
                    ),
                ),
                ("draft_step", models.PositiveSmallIntegerField(default=0)),
                ("form_data", models.JSONField(blank=True, default=dict)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("decided_at", models.DateTimeField(blank=True, null=True)),
                ("decision_reason", models.TextField(blank=True, default="")),
                ("patient_name", models.CharField(blank=True, default="", max_length=255)),
                ("date_of_birth", models.DateField(blank=True, null=True)),
                (
                    "level_of_care",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("0.5", "Early Intervention"),
                            ("1", "Outpatient Services"),
                            ("2.1", "Intensive Outpatient"),
                            ("2.5", "Partial Hospitalization"),
                            ("3.1", "Clinically Managed Low-Intensity Residential"),
                            ("3.3", "Clinically Managed Population-Specific High-Intensity Residential"),
                            ("3.5", "Clinically Managed High-Intensity Residential"),
                            ("3.7", "Medically Monitored Intensive Inpatient"),
                            ("4", "Medically Managed Intensive Inpatient"),
                        ],
                        default="",
                        max_length=8,
                    ),
                ),
                (
                    "decided_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "facility",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="asam_assessments",
                        to="facilities.facility",
                    ),
                ),
                (
                    "intake",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="asam_assessments",
                        to="intakes.intake",
                    ),
                ),
                (
                    "submitted_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "asam_assessment",
                "indexes": [
                    models.Index(fields=["facility", "status"], name="asam_facility_status_idx"),
                    models.Index(fields=["intake", "status"], name="asam_intake_status_idx"),
                ],
            },
        ),
    ]
