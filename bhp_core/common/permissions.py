# bhp_core/common/permissions.py

from __future__ import annotations

from typing import Set

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission, SAFE_METHODS

from bhp_core.iam.actor import Actor, get_actor
from bhp_core.iam.constants import Role
from bhp_core.iam.gate import Action, Decision, Target, can_access

ROLE_ADMIN = Role.ADMIN.value
ROLE_BHP = Role.BHP.value
ROLE_BHRF = Role.BHRF.value

ALL_ROLES = frozenset({ROLE_ADMIN, ROLE_BHP, ROLE_BHRF})
PROVIDER_ROLES = frozenset({ROLE_BHP, ROLE_BHRF})

FORBIDDEN_MSG = "Forbidden"


class ApprovedActorPermission(BasePermission):
    """
    View-level gate for every dashboard endpoint.

    - Requires an authenticated user with a resolvable Actor.
    - Unapproved actors are refused outright (own status + sign-out live on
      dedicated views that do not use this class).
    - allowed_roles_per_action narrows which roles may call each action; an
      unknown action on a SAFE request falls back to list/retrieve, anything
      else unknown is denied.

    Object-level ownership is decided by the gate in `authorize`/`get_authorized`.
    """
    message = FORBIDDEN_MSG

    # Override in subclasses: dict of action -> set of allowed roles
    allowed_roles_per_action: dict[str, Set[str]] = {
        "list": set(PROVIDER_ROLES),
        "retrieve": set(PROVIDER_ROLES),
        "create": set(PROVIDER_ROLES),
        "update": set(PROVIDER_ROLES),
        "partial_update": set(PROVIDER_ROLES),
        "destroy": set(PROVIDER_ROLES),
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        actor = get_actor(request)
        if not actor.is_approved:
            return False

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            allowed = self.allowed_roles_per_action.get("retrieve" if is_detail else "list")

        if allowed is None:
            return False

        return actor.role in allowed


class AdminPermission(ApprovedActorPermission):
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN},
        "retrieve": {ROLE_ADMIN},
        "approval": {ROLE_ADMIN},
    }


class AnyApprovedRolePermission(ApprovedActorPermission):
    """Any approved actor; object-level checks are left to the gate."""
    allowed_roles_per_action = {
        "list": set(ALL_ROLES),
        "retrieve": set(ALL_ROLES),
        "create": set(ALL_ROLES),
    }


class BHPOnlyPermission(ApprovedActorPermission):
    allowed_roles_per_action = {
        "list": {ROLE_BHP},
        "retrieve": {ROLE_BHP},
        "create": {ROLE_BHP},
        "update": {ROLE_BHP},
        "partial_update": {ROLE_BHP},
        "destroy": {ROLE_BHP},
        "decide": {ROLE_BHP},
    }


# -----------------------------
# Object-level gate helpers
# -----------------------------

def authorize(actor: Actor, action: Action, target: Target | None) -> None:
    """
    Raise the generic 403 unless the gate allows the action.
    """
    if can_access(actor, action, target) != Decision.ALLOW:
        raise PermissionDenied(FORBIDDEN_MSG)


def get_authorized(queryset: QuerySet, *, pk, actor: Actor, action: Action = Action.READ):
    """
    Load one row and run it through the gate.

    Missing rows, malformed ids and denied rows all produce the same 403 so
    callers cannot probe which ids exist. Models must expose access_scope().
    """
    try:
        obj = queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, DjangoValidationError, ValueError, TypeError):
        raise PermissionDenied(FORBIDDEN_MSG)

    authorize(actor, action, obj.access_scope())
    return obj
