# bhp_core/asam/selectors.py
from __future__ import annotations

import django_filters
from django.db.models import Exists, OuterRef, QuerySet

from bhp_core.asam.models import ASAMAssessment
from bhp_core.iam.actor import Actor
from bhp_core.iam.gate import facility_q
from bhp_core.intakes.models import Intake
from bhp_core.workflow.machine import ACTIVE_STATUSES, DocumentStatus


class ASAMFilter(django_filters.FilterSet):
    facility = django_filters.UUIDFilter(field_name="facility_id")
    intake = django_filters.UUIDFilter(field_name="intake_id")
    status = django_filters.ChoiceFilter(choices=DocumentStatus.choices)
    search = django_filters.CharFilter(field_name="patient_name", lookup_expr="icontains")

    class Meta:
        model = ASAMAssessment
        fields = ["facility", "intake", "status", "search"]


def assessments_for_actor(actor: Actor) -> QuerySet[ASAMAssessment]:
    return (
        ASAMAssessment.objects.select_related("facility", "intake")
        .filter(facility_q(actor))
        .order_by("-created_at")
    )


def has_active_assessment(*, intake_id, exclude_id=None) -> bool:
    qs = ASAMAssessment.objects.filter(intake_id=intake_id, status__in=ACTIVE_STATUSES)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    return qs.exists()


def eligible_intakes(actor: Actor) -> QuerySet[Intake]:
    """
    Approved intakes with no ASAM in an active cycle (pending, approved or
    conditional). A draft or denied assessment does not block a new one.
    """
    active = ASAMAssessment.objects.filter(intake_id=OuterRef("pk"), status__in=ACTIVE_STATUSES)
    return (
        Intake.objects.select_related("facility")
        .filter(facility_q(actor), status=DocumentStatus.APPROVED)
        .exclude(Exists(active))
        .order_by("-decided_at")
    )
