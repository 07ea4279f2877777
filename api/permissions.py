"""Permissions for REST API v1.

`ResourceAccess` hands every decision to `accounts.access.authorize`:
collection actions are checked against the view's model (or another
resource named by the view), detail actions against the fetched object,
so ownership is known when it matters.
"""
from __future__ import annotations

from rest_framework.permissions import BasePermission

from accounts.access import Action, authorize

DEFAULT_ACTIONS = {
    "list": Action.READ,
    "retrieve": Action.READ,
    "create": Action.CREATE,
    "update": Action.UPDATE,
    "partial_update": Action.UPDATE,
    "destroy": Action.DELETE,
}


class AccessControlMixin:
    """Viewset hooks consulted by `ResourceAccess`.

    `access_actions` maps extra viewset actions to engine actions;
    `get_access_resource` names what a collection-level action touches.
    """

    access_actions: dict[str, Action] = {}

    def get_access_action(self) -> Action:
        name = getattr(self, "action", None)
        if name in self.access_actions:
            return self.access_actions[name]
        if name in DEFAULT_ACTIONS:
            return DEFAULT_ACTIONS[name]
        return Action.READ if self.request.method in ("GET", "HEAD", "OPTIONS") else Action.UPDATE

    def get_access_resource(self):
        return self.queryset.model


class ResourceAccess(BasePermission):
    message = "You do not have permission to perform this action."

    def _decide(self, request, view, resource) -> bool:
        return authorize(request.user, view.get_access_action(), resource).allowed

    def has_permission(self, request, view):
        if getattr(view, "detail", False):
            # Ownership is only known once the object is fetched
            return bool(request.user and request.user.is_authenticated and request.user.is_active)
        return self._decide(request, view, view.get_access_resource())

    def has_object_permission(self, request, view, obj):
        return self._decide(request, view, obj)
