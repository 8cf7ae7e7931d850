# bhp_core/meetings/selectors.py
from __future__ import annotations

from datetime import datetime, timedelta

import django_filters
from django.db.models import QuerySet
from django.utils.timezone import now as tz_now

from bhp_core.iam.actor import Actor
from bhp_core.iam.gate import facility_q
from bhp_core.meetings.machine import LIVE_STATUSES
from bhp_core.meetings.models import Meeting, MeetingStatus


class MeetingFilter(django_filters.FilterSet):
    facility = django_filters.UUIDFilter(field_name="facility_id")
    status = django_filters.ChoiceFilter(choices=MeetingStatus.choices)

    class Meta:
        model = Meeting
        fields = ["facility", "status"]


def meetings_for_actor(actor: Actor, *, upcoming: bool = False, now: datetime | None = None) -> QuerySet[Meeting]:
    """
    Meetings of the actor's facilities, newest first. With upcoming=True only
    live meetings from `now` on, soonest first.
    """
    qs = Meeting.objects.select_related("facility").filter(facility_q(actor))
    if upcoming:
        return qs.filter(status__in=LIVE_STATUSES, scheduled_at__gte=now or tz_now()).order_by("scheduled_at")
    return qs.order_by("-scheduled_at")


def meetings_within(actor: Actor, *, now: datetime, hours: int = 24) -> QuerySet[Meeting]:
    return meetings_for_actor(actor, upcoming=True, now=now).filter(scheduled_at__lte=now + timedelta(hours=hours))
