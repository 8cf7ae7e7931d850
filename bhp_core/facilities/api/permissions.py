from __future__ import annotations

from bhp_core.common.permissions import PROVIDER_ROLES, ROLE_BHP, ApprovedActorPermission


class FacilityPermission(ApprovedActorPermission):
    """
    - read: the owning BHP and the facility's own BHRF (narrowed by the gate)
    - write: BHP only
    """
    allowed_roles_per_action = {
        "list": set(PROVIDER_ROLES),
        "retrieve": set(PROVIDER_ROLES),
        "create": {ROLE_BHP},
        "update": {ROLE_BHP},
        "partial_update": {ROLE_BHP},
    }
