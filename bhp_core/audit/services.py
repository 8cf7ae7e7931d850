# bhp_core/audit/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from django.db import transaction

from bhp_core.audit.models import AuditEvent
from bhp_core.common.result import Outcome

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


@dataclass(frozen=True)
class RequestMeta:
    """
    Caller network metadata captured at the view boundary.
    """
    ip_address: str = UNKNOWN
    user_agent: str = UNKNOWN

    @classmethod
    def from_request(cls, request) -> "RequestMeta":
        if request is None:
            return cls()
        meta = getattr(request, "META", {}) or {}

        ip = UNKNOWN
        forwarded = meta.get("HTTP_X_FORWARDED_FOR")
        if forwarded:
            ip = forwarded.split(",")[0].strip() or UNKNOWN
        elif meta.get("HTTP_X_REAL_IP"):
            ip = meta["HTTP_X_REAL_IP"].strip() or UNKNOWN

        user_agent = (meta.get("HTTP_USER_AGENT") or "").strip() or UNKNOWN
        return cls(ip_address=ip[:64], user_agent=user_agent[:512])


@dataclass(frozen=True)
class AuditRecord:
    action: str
    entity_type: str
    entity_id: Optional[str]
    actor_user_id: int | None
    details: Dict[str, Any]
    ip_address: str
    user_agent: str


class AuditService:
    """
    Central audit writer (append-only).

    record() is best-effort: it runs in its own savepoint so a failed insert
    neither raises nor poisons the caller's transaction. When called inside a
    service's transaction.atomic block the entry commits or rolls back together
    with the state change it describes.
    """

    @staticmethod
    def record(
        *,
        actor_user_id: int | None,
        action: str,
        entity_type: str,
        entity_id: Any = None,
        details: Optional[Dict[str, Any]] = None,
        meta: Optional[RequestMeta] = None,
    ) -> Outcome[AuditRecord]:
        details = details or {}
        meta = meta or RequestMeta()
        entity_id_str = str(entity_id) if entity_id is not None else None

        try:
            with transaction.atomic():
                AuditEvent.objects.create(
                    actor_user_id=actor_user_id,
                    action=action,
                    entity_type=entity_type,
                    entity_id=entity_id_str or "",
                    details=details,
                    ip_address=meta.ip_address,
                    user_agent=meta.user_agent,
                )
        except Exception as exc:  # audit must never break the triggering operation
            logger.exception(
                "Failed to record audit event %s for %s:%s (actor=%s)",
                action,
                entity_type,
                entity_id_str,
                actor_user_id,
            )
            return Outcome.failure(exc)

        return Outcome.success(
            AuditRecord(
                action=action,
                entity_type=entity_type,
                entity_id=entity_id_str,
                actor_user_id=actor_user_id,
                details=details,
                ip_address=meta.ip_address,
                user_agent=meta.user_agent,
            )
        )
