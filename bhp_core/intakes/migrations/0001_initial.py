import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("facilities", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Intake",
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
                ("resident_name", models.CharField(blank=True, default="", max_length=255)),
                ("date_of_birth", models.DateField(blank=True, null=True)),
                ("admission_date", models.DateField(blank=True, null=True)),
                ("sex", models.CharField(blank=True, default="", max_length=32)),
                ("language", models.CharField(blank=True, default="", max_length=64)),
                ("patient_phone", models.CharField(blank=True, default="", max_length=32)),
                ("emergency_contact_name", models.CharField(blank=True, default="", max_length=255)),
                ("emergency_contact_phone", models.CharField(blank=True, default="", max_length=32)),
                ("insurance_provider", models.CharField(blank=True, default="", max_length=255)),
                ("policy_number", models.CharField(blank=True, default="", max_length=64)),
                ("medications", models.JSONField(blank=True, default=list)),
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
                        related_name="intakes",
                        to="facilities.facility",
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
                "db_table": "intakes_intake",
                "indexes": [models.Index(fields=["facility", "status"], name="intake_facility_status_idx")],
            },
        ),
    ]
