from __future__ import annotations

from bhp_core.common.permissions import PROVIDER_ROLES, ROLE_BHP, ROLE_BHRF, ApprovedActorPermission


class CredentialPermission(ApprovedActorPermission):
    allowed_roles_per_action = {
        "list": {ROLE_BHP},
        "retrieve": {ROLE_BHP},
        "create": {ROLE_BHP},
        "partial_update": {ROLE_BHP},
        "destroy": {ROLE_BHP},
        "download": {ROLE_BHP},
    }


class DocumentCategoryPermission(ApprovedActorPermission):
    allowed_roles_per_action = {
        "list": set(PROVIDER_ROLES),
        "create": set(PROVIDER_ROLES),
        "partial_update": set(PROVIDER_ROLES),
        "destroy": set(PROVIDER_ROLES),
    }


class DocumentPermission(ApprovedActorPermission):
    """
    - create: the BHP requests a document from a facility
    - upload: the facility's BHRF uploads or fulfils a request
    """
    allowed_roles_per_action = {
        "list": set(PROVIDER_ROLES),
        "retrieve": set(PROVIDER_ROLES),
        "create": {ROLE_BHP},
        "upload": {ROLE_BHRF},
        "destroy": set(PROVIDER_ROLES),
        "download": set(PROVIDER_ROLES),
    }


class EmployeePermission(ApprovedActorPermission):
    allowed_roles_per_action = {
        "list": set(PROVIDER_ROLES),
        "retrieve": set(PROVIDER_ROLES),
        "create": set(PROVIDER_ROLES),
        "partial_update": set(PROVIDER_ROLES),
        "destroy": set(PROVIDER_ROLES),
        "send_email": set(PROVIDER_ROLES),
    }


class EmployeeDocumentTypePermission(ApprovedActorPermission):
    allowed_roles_per_action = {
        "list": set(PROVIDER_ROLES),
        "create": {ROLE_BHRF},
        "partial_update": {ROLE_BHRF},
        "destroy": {ROLE_BHRF},
    }


class EmployeeDocumentPermission(ApprovedActorPermission):
    allowed_roles_per_action = {
        "list": set(PROVIDER_ROLES),
        "create": set(PROVIDER_ROLES),
        "destroy": set(PROVIDER_ROLES),
        "download": set(PROVIDER_ROLES),
    }
