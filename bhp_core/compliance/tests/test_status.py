from datetime import datetime, timedelta, timezone

import pytest

from bhp_core.compliance.status import ComplianceStatus, derive_status

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
SECOND = timedelta(seconds=1)
WINDOW = timedelta(days=30)


@pytest.mark.parametrize(
    "expires_at, expected",
    [
        (NOW - SECOND, ComplianceStatus.EXPIRED),
        (NOW - timedelta(days=400), ComplianceStatus.EXPIRED),
        (NOW, ComplianceStatus.EXPIRING_SOON),
        (NOW + SECOND, ComplianceStatus.EXPIRING_SOON),
        (NOW + WINDOW - SECOND, ComplianceStatus.EXPIRING_SOON),
        (NOW + WINDOW, ComplianceStatus.EXPIRING_SOON),
        (NOW + WINDOW + SECOND, ComplianceStatus.VALID),
        (None, ComplianceStatus.VALID),
    ],
)
def test_status_boundaries(expires_at, expected):
    assert derive_status(expires_at, False, NOW) == expected


def test_no_expiration_wins_over_a_past_date():
    assert derive_status(NOW - timedelta(days=10), True, NOW) == ComplianceStatus.VALID
