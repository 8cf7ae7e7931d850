from __future__ import annotations

from bhp_core.common.permissions import PROVIDER_ROLES, ROLE_BHP, ROLE_BHRF, ApprovedActorPermission


class WorkflowDocumentPermission(ApprovedActorPermission):
    """
    - BHRF authors (create, submit)
    - BHP decides
    - both read and edit, narrowed by the gate and the document policy
    """
    allowed_roles_per_action = {
        "list": set(PROVIDER_ROLES),
        "retrieve": set(PROVIDER_ROLES),
        "create": {ROLE_BHRF},
        "partial_update": set(PROVIDER_ROLES),
        "submit": {ROLE_BHRF},
        "decide": {ROLE_BHP},
        "pdf": set(PROVIDER_ROLES),
        "eligible_intakes": set(PROVIDER_ROLES),
    }
