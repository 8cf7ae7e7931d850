# bhp_core/compliance/models.py
from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.db import models
from django.utils.timezone import now as tz_now

from bhp_core.common.models import UUIDModel
from bhp_core.compliance.status import ComplianceStatus, derive_status
from bhp_core.iam.gate import FacilityScope, ProfileScope


class ExpiringArtifact(UUIDModel):
    """
    Anything with expiry metadata. The compliance status is derived on read.
    """
    expires_at = models.DateTimeField(null=True, blank=True, db_index=True)
    no_expiration = models.BooleanField(default=False)

    class Meta:
        abstract = True

    def compliance_status(self, now=None) -> ComplianceStatus:
        return derive_status(self.expires_at, self.no_expiration, now or tz_now())


class Deactivatable(models.Model):
    """
    Phase one of a two-phase delete: rows are marked inactive and purged later
    by `manage.py purge_inactive` once nothing references them.
    """
    is_active = models.BooleanField(default=True, db_index=True)
    deactivated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True


# -----------------------------
# BHP credentials
# -----------------------------

class CredentialType(models.TextChoices):
    LICENSE = "LICENSE", "License"
    CERTIFICATION = "CERTIFICATION", "Certification"
    INSURANCE = "INSURANCE", "Insurance"
    RESUME = "RESUME", "Resume"
    OTHER = "OTHER", "Other"


class Credential(ExpiringArtifact):
    bhp = models.ForeignKey("iam.BHPProfile", on_delete=models.CASCADE, related_name="credentials")

    type = models.CharField(max_length=16, choices=CredentialType.choices)
    name = models.CharField(max_length=255)
    file_key = models.CharField(max_length=512)
    is_public = models.BooleanField(default=False)

    class Meta:
        db_table = "compliance_credential"
        indexes = [
            models.Index(fields=["bhp", "expires_at"], name="credential_bhp_expiry_idx"),
        ]

    def access_scope(self) -> ProfileScope:
        return ProfileScope(bhp_id=self.bhp_id)

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"


# -----------------------------
# Facility documents
# -----------------------------

class DocumentCategory(UUIDModel, Deactivatable):
    """
    Owned either by a BHP (shared with all of its facilities) or by a single
    facility. Exactly one of bhp/facility is set.
    """
    bhp = models.ForeignKey(
        "iam.BHPProfile",
        on_delete=models.CASCADE,
        related_name="document_categories",
        null=True,
        blank=True,
    )
    facility = models.ForeignKey(
        "facilities.Facility",
        on_delete=models.CASCADE,
        related_name="document_categories",
        null=True,
        blank=True,
    )

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    is_required = models.BooleanField(default=False)

    class Meta:
        db_table = "compliance_document_category"
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(bhp__isnull=False, facility__isnull=True)
                    | models.Q(bhp__isnull=True, facility__isnull=False)
                ),
                name="doc_category_single_owner",
            ),
        ]
        indexes = [
            models.Index(fields=["bhp", "is_active"], name="doc_category_bhp_idx"),
            models.Index(fields=["facility", "is_active"], name="doc_category_facility_idx"),
        ]

    def access_scope(self):
        if self.facility_id is not None:
            return self.facility.member_scope()
        return ProfileScope(bhp_id=self.bhp_id)

    def __str__(self) -> str:
        return self.name


class DocumentStatus(models.TextChoices):
    REQUESTED = "REQUESTED", "Requested"
    UPLOADED = "UPLOADED", "Uploaded"


class DocumentOwnerType(models.TextChoices):
    FACILITY = "FACILITY", "Facility"
    STAFF = "STAFF", "Staff"
    RESIDENT = "RESIDENT", "Resident"


class Document(ExpiringArtifact):
    """
    A facility document. Either requested by the BHP and later fulfilled by the
    BHRF, or uploaded directly by the BHRF. Every upload adds a DocumentVersion.
    """
    facility = models.ForeignKey("facilities.Facility", on_delete=models.CASCADE, related_name="documents")
    category = models.ForeignKey(
        DocumentCategory,
        on_delete=models.PROTECT,
        related_name="documents",
        null=True,
        blank=True,
    )

    name = models.CharField(max_length=255)
    type = models.CharField(max_length=128)
    status = models.CharField(
        max_length=16,
        choices=DocumentStatus.choices,
        default=DocumentStatus.REQUESTED,
        db_index=True,
    )

    owner_type = models.CharField(
        max_length=16,
        choices=DocumentOwnerType.choices,
        default=DocumentOwnerType.FACILITY,
    )
    employee = models.ForeignKey(
        "compliance.Employee",
        on_delete=models.SET_NULL,
        related_name="documents",
        null=True,
        blank=True,
    )
    intake = models.ForeignKey(
        "intakes.Intake",
        on_delete=models.SET_NULL,
        related_name="documents",
        null=True,
        blank=True,
    )

    file_key = models.CharField(max_length=512, blank=True, default="")
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    uploaded_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "compliance_document"
        indexes = [
            models.Index(fields=["facility", "status"], name="document_facility_status_idx"),
            models.Index(fields=["facility", "expires_at"], name="document_facility_expiry_idx"),
        ]

    def access_scope(self) -> FacilityScope:
        return self.facility.member_scope()

    def compliance_status(self, now=None) -> Optional[ComplianceStatus]:
        # nothing to expire until a file exists
        if self.status == DocumentStatus.REQUESTED:
            return None
        return super().compliance_status(now)

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"


class DocumentVersion(UUIDModel):
    document = models.ForeignKey(Document, on_delete=models.CASCADE, related_name="versions")
    file_key = models.CharField(max_length=512)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "compliance_document_version"
        ordering = ["-created_at"]


# -----------------------------
# Employees
# -----------------------------

class Employee(UUIDModel, Deactivatable):
    facility = models.ForeignKey("facilities.Facility", on_delete=models.CASCADE, related_name="employees")

    first_name = models.CharField(max_length=128)
    last_name = models.CharField(max_length=128)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    position = models.CharField(max_length=128, blank=True, default="")
    hire_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "compliance_employee"
        indexes = [
            models.Index(fields=["facility", "is_active"], name="employee_facility_active_idx"),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def access_scope(self) -> FacilityScope:
        return self.facility.member_scope()

    def __str__(self) -> str:
        return self.full_name


class EmployeeDocumentType(UUIDModel, Deactivatable):
    facility = models.ForeignKey(
        "facilities.Facility",
        on_delete=models.CASCADE,
        related_name="employee_document_types",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    is_required = models.BooleanField(default=False)

    class Meta:
        db_table = "compliance_employee_document_type"
        constraints = [
            models.UniqueConstraint(fields=["facility", "name"], name="uniq_employee_doc_type_name"),
        ]

    def access_scope(self) -> FacilityScope:
        return self.facility.member_scope()

    def __str__(self) -> str:
        return self.name


class EmployeeDocument(ExpiringArtifact):
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name="employee_documents")
    document_type = models.ForeignKey(
        EmployeeDocumentType,
        on_delete=models.PROTECT,
        related_name="employee_documents",
    )

    file_key = models.CharField(max_length=512)
    issued_at = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "compliance_employee_document"
        indexes = [
            models.Index(fields=["employee", "document_type"], name="employee_doc_type_idx"),
        ]

    def access_scope(self) -> FacilityScope:
        return self.employee.facility.member_scope()
