# bhp_core/compliance/status.py
"""
Compliance status of an expiring artifact.

Never stored: always recomputed from (expires_at, no_expiration, now).
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from django.db import models

EXPIRING_SOON_DAYS = 30


class ComplianceStatus(models.TextChoices):
    VALID = "VALID", "Valid"
    EXPIRING_SOON = "EXPIRING_SOON", "Expiring soon"
    EXPIRED = "EXPIRED", "Expired"


def derive_status(expires_at: Optional[datetime], no_expiration: bool, now: datetime) -> ComplianceStatus:
    if no_expiration or expires_at is None:
        return ComplianceStatus.VALID
    if expires_at < now:
        return ComplianceStatus.EXPIRED
    if expires_at <= now + timedelta(days=EXPIRING_SOON_DAYS):
        return ComplianceStatus.EXPIRING_SOON
    return ComplianceStatus.VALID
