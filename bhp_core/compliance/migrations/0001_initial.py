import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def _base_fields():
    return [
        ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
    ]


def _expiry_fields():
    return [
        ("expires_at", models.DateTimeField(blank=True, db_index=True, null=True)),
        ("no_expiration", models.BooleanField(default=False)),
    ]


def _deactivation_fields():
    return [
        ("is_active", models.BooleanField(db_index=True, default=True)),
        ("deactivated_at", models.DateTimeField(blank=True, null=True)),
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
        ("iam", "0001_initial"),
        ("facilities", "0001_initial"),
        ("intakes", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Credential",
            fields=_base_fields()
            + _expiry_fields()
            + [
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("LICENSE", "License"),
                            ("CERTIFICATION", "Certification"),
                            ("INSURANCE", "Insurance"),
                            ("RESUME", "Resume"),
                            ("OTHER", "Other"),
                        ],
                        max_length=16,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("file_key", models.CharField(max_length=512)),
                ("is_public", models.BooleanField(default=False)),
                (
                    "bhp",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="credentials",
                        to="iam.bhpprofile",
                    ),
                ),
            ],
            options={
                "db_table": "compliance_credential",
                "indexes": [models.Index(fields=["bhp", "expires_at"], name="credential_bhp_expiry_idx")],
            },
        ),
        migrations.CreateModel(
            name="DocumentCategory",
            fields=_base_fields()
            + _deactivation_fields()
            + [
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("is_required", models.BooleanField(default=False)),
                (
                    "bhp",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="document_categories",
                        to="iam.bhpprofile",
                    ),
                ),
                (
                    "facility",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="document_categories",
                        to="facilities.facility",
                    ),
                ),
            ],
            options={
                "db_table": "compliance_document_category",
                "indexes": [
                    models.Index(fields=["bhp", "is_active"], name="doc_category_bhp_idx"),
                    models.Index(fields=["facility", "is_active"], name="doc_category_facility_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=(
                            models.Q(bhp__isnull=False, facility__isnull=True)
                            | models.Q(bhp__isnull=True, facility__isnull=False)
                        ),
                        name="doc_category_single_owner",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Employee",
            fields=_base_fields()
            + _deactivation_fields()
            + [
                ("first_name", models.CharField(max_length=128)),
                ("last_name", models.CharField(max_length=128)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("position", models.CharField(blank=True, default="", max_length=128)),
                ("hire_date", models.DateField(blank=True, null=True)),
                (
                    "facility",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="employees",
                        to="facilities.facility",
                    ),
                ),
            ],
            options={
                "db_table": "compliance_employee",
                "indexes": [models.Index(fields=["facility", "is_active"], name="employee_facility_active_idx")],
            },
        ),
        migrations.CreateModel(
            name="Document",
            fields=_base_fields()
            + _expiry_fields()
            + [
                ("name", models.CharField(max_length=255)),
                ("type", models.CharField(max_length=128)),
                (
                    "status",
                    models.CharField(
                        choices=[("REQUESTED", "Requested"), ("UPLOADED", "Uploaded")],
                        db_index=True,
                        default="REQUESTED",
                        max_length=16,
                    ),
                ),
                (
                    "owner_type",
                    models.CharField(
                        choices=[("FACILITY", "Facility"), ("STAFF", "Staff"), ("RESIDENT", "Resident")],
                        default="FACILITY",
                        max_length=16,
                    ),
                ),
                ("file_key", models.CharField(blank=True, default="", max_length=512)),
                ("uploaded_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="documents",
                        to="compliance.documentcategory",
                    ),
                ),
                (
                    "employee",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="documents",
                        to="compliance.employee",
                    ),
                ),
                (
                    "facility",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="documents",
                        to="facilities.facility",
                    ),
                ),
                (
                    "intake",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="documents",
                        to="intakes.intake",
                    ),
                ),
                ("requested_by", _user_fk()),
                ("uploaded_by", _user_fk()),
            ],
            options={
                "db_table": "compliance_document",
                "indexes": [
                    models.Index(fields=["facility", "status"], name="document_facility_status_idx"),
                    models.Index(fields=["facility", "expires_at"], name="document_facility_expiry_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DocumentVersion",
            fields=_base_fields()
            + [
                ("file_key", models.CharField(max_length=512)),
                (
                    "document",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="versions",
                        to="compliance.document",
                    ),
                ),
                ("uploaded_by", _user_fk()),
            ],
            options={
                "db_table": "compliance_document_version",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="EmployeeDocumentType",
            fields=_base_fields()
            + _deactivation_fields()
            + [
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("is_required", models.BooleanField(default=False)),
                (
                    "facility",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="employee_document_types",
                        to="facilities.facility",
                    ),
                ),
            ],
            options={
                "db_table": "compliance_employee_document_type",
                "constraints": [
                    models.UniqueConstraint(fields=["facility", "name"], name="uniq_employee_doc_type_name"),
                ],
            },
        ),
        migrations.CreateModel(
            name="EmployeeDocument",
            fields=_base_fields()
            + _expiry_fields()
            + [
                ("file_key", models.CharField(max_length=512)),
                ("issued_at", models.DateField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "document_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="employee_documents",
                        to="compliance.employeedocumenttype",
                    ),
                ),
                (
                    "employee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="employee_documents",
                        to="compliance.employee",
                    ),
                ),
                ("uploaded_by", _user_fk()),
            ],
            options={
                "db_table": "compliance_employee_document",
                "indexes": [models.Index(fields=["employee", "document_type"], name="employee_doc_type_idx")],
            },
        ),
    ]
