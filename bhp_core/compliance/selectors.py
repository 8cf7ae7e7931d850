# bhp_core/compliance/selectors.py
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

import django_filters
from django.db.models import Q, QuerySet

from bhp_core.compliance.models import (
    Credential,
    Document,
    DocumentCategory,
    DocumentOwnerType,
    DocumentStatus,
    Employee,
    EmployeeDocument,
    EmployeeDocumentType,
)
from bhp_core.facilities.models import Facility
from bhp_core.iam.actor import Actor, AdminActor, BHPActor, BHRFActor, assert_never
from bhp_core.iam.gate import facility_q


class DocumentFilter(django_filters.FilterSet):
    facility = django_filters.UUIDFilter(field_name="facility_id")
    category = django_filters.UUIDFilter(field_name="category_id")
    employee = django_filters.UUIDFilter(field_name="employee_id")
    intake = django_filters.UUIDFilter(field_name="intake_id")
    status = django_filters.ChoiceFilter(choices=DocumentStatus.choices)
    owner_type = django_filters.ChoiceFilter(choices=DocumentOwnerType.choices)

    class Meta:
        model = Document
        fields = ["facility", "category", "employee", "intake", "status", "owner_type"]


def credentials_for_actor(actor: Actor) -> QuerySet[Credential]:
    if isinstance(actor, BHPActor) and actor.is_approved and actor.bhp_profile_id:
        return Credential.objects.filter(bhp_id=actor.bhp_profile_id).order_by("-created_at")
    return Credential.objects.none()


def categories_for_actor(actor: Actor, *, include_inactive: bool = False) -> QuerySet[DocumentCategory]:
    """
    BHP: its own categories plus those of its facilities.
    BHRF: its facility's categories plus the ones its BHP shares.
    """
    if not actor.is_approved:
        return DocumentCategory.objects.none()

    if isinstance(actor, BHPActor):
        if actor.bhp_profile_id is None:
            return DocumentCategory.objects.none()
        q = Q(bhp_id=actor.bhp_profile_id) | Q(facility__bhp_id=actor.bhp_profile_id)
    elif isinstance(actor, BHRFActor):
        if actor.facility_id is None:
            return DocumentCategory.objects.none()
        bhp_id = Facility.objects.filter(id=actor.facility_id).values_list("bhp_id", flat=True).first()
        q = Q(facility_id=actor.facility_id) | Q(bhp_id=bhp_id)
    elif isinstance(actor, AdminActor):
        return DocumentCategory.objects.none()
    else:
        assert_never(actor)

    qs = DocumentCategory.objects.filter(q)
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("name")


def category_visible_to_facility(category: DocumentCategory, facility: Facility) -> bool:
    if not category.is_active:
        return False
    if category.facility_id is not None:
        return category.facility_id == facility.id
    return category.bhp_id == facility.bhp_id


def documents_for_actor(actor: Actor) -> QuerySet[Document]:
    return (
        Document.objects.select_related("facility", "category", "employee")
        .filter(facility_q(actor))
        .order_by("-created_at")
    )


def employees_for_actor(actor: Actor, *, facility_id=None, include_inactive: bool = False) -> QuerySet[Employee]:
    qs = Employee.objects.select_related("facility").filter(facility_q(actor))
    if facility_id:
        qs = qs.filter(facility_id=facility_id)
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("last_name", "first_name")


def employee_document_types_for_actor(
    actor: Actor,
    *,
    include_inactive: bool = False,
) -> QuerySet[EmployeeDocumentType]:
    qs = EmployeeDocumentType.objects.filter(facility_q(actor))
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("name")


def employee_documents_for_actor(actor: Actor, *, employee_id=None) -> QuerySet[EmployeeDocument]:
    qs = EmployeeDocument.objects.select_related("employee", "document_type").filter(
        facility_q(actor, field="employee__facility")
    )
    if employee_id:
        qs = qs.filter(employee_id=employee_id)
    return qs.order_by("-created_at")


# -----------------------------
# Counters used by the notification aggregator
# -----------------------------

def expired_credential_count(*, bhp_id, now: datetime) -> int:
    return Credential.objects.filter(bhp_id=bhp_id, no_expiration=False, expires_at__lt=now).count()


def requested_document_count(*, facility_id) -> int:
    return Document.objects.filter(facility_id=facility_id, status=DocumentStatus.REQUESTED).count()


def expiring_document_count(*, facility_id, now: datetime, days: int = 7) -> int:
    return (
        Document.objects.filter(
            facility_id=facility_id,
            no_expiration=False,
            expires_at__gte=now,
            expires_at__lte=now + timedelta(days=days),
        )
        .exclude(status=DocumentStatus.REQUESTED)
        .count()
    )


def unused_inactive_rows(*, older_than: Optional[datetime] = None) -> dict[str, QuerySet]:
    """
    Inactive categories and employee document types that nothing references,
    i.e. what phase two of the two-phase delete may remove.
    """
    categories = DocumentCategory.objects.filter(is_active=False, documents__isnull=True)
    doc_types = EmployeeDocumentType.objects.filter(is_active=False, employee_documents__isnull=True)
    if older_than is not None:
        categories = categories.filter(deactivated_at__lte=older_than)
        doc_types = doc_types.filter(deactivated_at__lte=older_than)
    return {"document_categories": categories, "employee_document_types": doc_types}
