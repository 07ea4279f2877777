"""Access control engine.

`authorize(actor, action, resource)` is a pure decision function shared by
the API permission classes and the domain services. A resource is a model
instance, a model class (for collection-level actions such as create), or
a plain kind string for resources without a model (statistics).

Rules, first match wins:

1. Unauthenticated or inactive actor: deny (UNAUTHENTICATED).
2. Role-gated actions: catalogue writes, feedback moderation and user
   administration require the admin role; ownership never substitutes.
3. Owner of a user or feedback resource: allow (OWNER).
4. Admin: allow (ADMIN_OVERRIDE).
5. Open actions for any authenticated actor: allow (AUTHENTICATED).
6. Otherwise: deny (FORBIDDEN).
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from django.core.exceptions import PermissionDenied

from .models import Role


class Action(str, enum.Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    MODERATE = "moderate"
    ADMINISTER = "administer"


class Reason(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    OWNER = "owner"
    ADMIN_OVERRIDE = "admin_override"
    AUTHENTICATED = "authenticated"
    FORBIDDEN = "forbidden"


STATISTICS = "statistics"
CATALOGUE_KINDS = frozenset({"professor", "discipline", "infrastructure"})
OWNED_KINDS = frozenset({"user", "feedback"})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Reason

    def __bool__(self) -> bool:
        return self.allowed


class AccessDenied(PermissionDenied):
    """Raised by `ensure_allowed` when the engine denies an action."""

    def __init__(self, decision: Decision):
        self.decision = decision
        super().__init__(decision.reason.value)


def is_authenticated(actor: Any) -> bool:
    return bool(
        actor is not None
        and getattr(actor, "is_authenticated", False)
        and getattr(actor, "is_active", False)
    )


def role_of(actor: Any) -> str | None:
    return getattr(getattr(actor, "profile", None), "role", None)


def is_admin(actor: Any) -> bool:
    return is_authenticated(actor) and role_of(actor) == Role.ADMIN


def resource_kind(resource: Any) -> str:
    if isinstance(resource, str):
        return resource
    meta = getattr(resource, "_meta", None)
    if meta is None:
        raise TypeError(f"Cannot determine the kind of {resource!r}")
    return meta.model_name


def owner_id_of(resource: Any) -> int | None:
    """Return the owning user id of a user/feedback instance, else None.

    Feedback ownership is the true author even for anonymous feedback.
    """
    if isinstance(resource, (str, type)):
        return None
    kind = resource_kind(resource)
    if kind == "user":
        return resource.pk
    if kind == "feedback":
        return resource.author_id
    return None


def _is_role_gated(action: Action, kind: str) -> bool:
    if action in (Action.MODERATE, Action.ADMINISTER):
        return True
    return kind in CATALOGUE_KINDS and action in (Action.CREATE, Action.UPDATE, Action.DELETE)


def _is_open(action: Action, kind: str, resource: Any) -> bool:
    if kind in CATALOGUE_KINDS or kind == STATISTICS:
        return action == Action.READ
    if kind == "feedback":
        if action == Action.CREATE:
            return True
        if action == Action.READ:
            # Collection reads are scoped by the caller; single records must be approved
            return isinstance(resource, type) or getattr(resource, "is_public", False)
    return False


def authorize(actor: Any, action: Action | str, resource: Any) -> Decision:
    action = Action(action)
    if not is_authenticated(actor):
        return Decision(False, Reason.UNAUTHENTICATED)
    kind = resource_kind(resource)
    admin = role_of(actor) == Role.ADMIN
    if _is_role_gated(action, kind):
        return Decision(True, Reason.ADMIN_OVERRIDE) if admin else Decision(False, Reason.FORBIDDEN)
    if kind in OWNED_KINDS:
        owner_id = owner_id_of(resource)
        if owner_id is not None and owner_id == actor.pk:
            return Decision(True, Reason.OWNER)
    if admin:
        return Decision(True, Reason.ADMIN_OVERRIDE)
    if _is_open(action, kind, resource):
        return Decision(True, Reason.AUTHENTICATED)
    return Decision(False, Reason.FORBIDDEN)


def ensure_allowed(actor: Any, action: Action | str, resource: Any) -> Decision:
    decision = authorize(actor, action, resource)
    if not decision:
        raise AccessDenied(decision)
    return decision
