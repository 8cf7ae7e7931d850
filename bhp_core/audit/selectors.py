# bhp_core/audit/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from bhp_core.audit.models import AuditEvent


def list_audit_events(
    *,
    entity_type: str | None = None,
    entity_id: str | None = None,
    action: str | None = None,
    actor_user_id: int | None = None,
) -> QuerySet[AuditEvent]:
    qs = AuditEvent.objects.select_related("actor_user")

    if entity_type:
        qs = qs.filter(entity_type=entity_type)
    if entity_id:
        qs = qs.filter(entity_id=str(entity_id))
    if action:
        qs = qs.filter(action=action)
    if actor_user_id is not None:
        qs = qs.filter(actor_user_id=actor_user_id)

    return qs.order_by("-occurred_at", "-id")


def events_for_entity(*, entity_type: str, entity_id) -> QuerySet[AuditEvent]:
    """Chronological trail of one entity (oldest first)."""
    return AuditEvent.objects.filter(entity_type=entity_type, entity_id=str(entity_id)).order_by("id")
