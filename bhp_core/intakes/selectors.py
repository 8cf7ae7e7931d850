# bhp_core/intakes/selectors.py
from __future__ import annotations

import django_filters
from django.db.models import QuerySet

from bhp_core.iam.actor import Actor
from bhp_core.iam.gate import facility_q
from bhp_core.intakes.models import Intake
from bhp_core.workflow.machine import DocumentStatus


class IntakeFilter(django_filters.FilterSet):
    facility = django_filters.UUIDFilter(field_name="facility_id")
    status = django_filters.ChoiceFilter(choices=DocumentStatus.choices)
    search = django_filters.CharFilter(field_name="resident_name", lookup_expr="icontains")

    class Meta:
        model = Intake
        fields = ["facility", "status", "search"]


def intakes_for_actor(actor: Actor) -> QuerySet[Intake]:
    return (
        Intake.objects.select_related("facility")
        .filter(facility_q(actor))
        .order_by("-created_at")
    )
