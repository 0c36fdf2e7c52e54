"""Static role -> resource -> action table (the permission gate).

VIEW is not listed in the table: any authenticated role may read a resource
unless it appears in ``VIEW_RESTRICTIONS`` for that role.
"""

from __future__ import annotations

from typing import Mapping, Union

from ..core.enums import Action, Resource, Role

_CUD = frozenset({Action.CREATE, Action.UPDATE, Action.DELETE})
_NONE: frozenset[Action] = frozenset()

PERMISSIONS: Mapping[Role, Mapping[Resource, frozenset[Action]]] = {
    Role.ADMIN: {resource: _CUD for resource in Resource},
    Role.VICE_PRINCIPAL: {
        resource: (_NONE if resource in (Resource.PAYMENT, Resource.USER) else _CUD)
        for resource in Resource
    },
    Role.TEACHER: {
        # Scoped further to the teacher's own classes by PermissionService.
        Resource.STUDENT: frozenset({Action.UPDATE}),
        Resource.ATTENDANCE: frozenset({Action.UPDATE}),
    },
    Role.FINANCE: {
        Resource.PAYMENT: _CUD,
        Resource.MEAL: frozenset({Action.CREATE, Action.UPDATE}),
    },
}

VIEW_RESTRICTIONS: Mapping[Role, frozenset[Resource]] = {
    Role.TEACHER: frozenset({Resource.PAYMENT, Resource.USER, Resource.SYSTEM}),
    Role.FINANCE: frozenset({Resource.USER, Resource.SYSTEM}),
}


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        return None


def has_permission(
    role: Union[Role, str],
    resource: Union[Resource, str],
    action: Union[Action, str],
) -> bool:
    """Pure lookup over the static table. Unknown names are never allowed."""

    role_e = _coerce(Role, role)
    resource_e = _coerce(Resource, resource)
    action_e = _coerce(Action, action)
    if role_e is None or resource_e is None or action_e is None:
        return False

    if role_e == Role.ADMIN:
        return True

    if action_e == Action.VIEW:
        return resource_e not in VIEW_RESTRICTIONS.get(role_e, _NONE)

    return action_e in PERMISSIONS.get(role_e, {}).get(resource_e, _NONE)


def allowed_actions(role: Union[Role, str], resource: Union[Resource, str]) -> list[Action]:
    """Actions a role may perform on a resource, for rendering action buttons."""

    return [action for action in Action if has_permission(role, resource, action)]


def permission_matrix(role: Union[Role, str]) -> dict[str, list[str]]:
    return {
        resource.value: [action.value for action in allowed_actions(role, resource)]
        for resource in Resource
    }
