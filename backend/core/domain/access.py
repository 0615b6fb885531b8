"""
core.domain.access — Role-scoped queryset selectors (shared patterns).

This module provides shared utilities that each app's service layer
calls to obtain querysets filtered by the requesting user's role in the
fixed administrative hierarchy.

╔══════════════════════════════════════════════════════════════════╗
║  IMPORTANT — Per-app scoping logic does NOT live here.         ║
║  Each app's ``services.py`` owns its own scope-rules mapping.  ║
║  This module provides:                                         ║
║    1) ``apply_role_scope`` — role-keyed filter dispatch.       ║
║    2) ``require_role``     — guard that checks the role.       ║
║    3) ``get_user_role_name`` — informational role helper.      ║
╚══════════════════════════════════════════════════════════════════╝

Usage in an app's service layer::

    from core.domain.access import apply_role_scope

    COMPLAINT_SCOPE_RULES = {
        "citizen":            lambda qs, u: qs.filter(citizen=u),
        "stakeholder_office": lambda qs, u: qs.filter(stakeholder_office=u),
        "kentiba_biro":       lambda qs, u: qs,
    }

    qs = apply_role_scope(Complaint.objects.all(), user, scope_rules=COMPLAINT_SCOPE_RULES)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from django.db.models import QuerySet

from core.domain.exceptions import AuthorizationError

if TYPE_CHECKING:
    from accounts.models import User

# Takes (queryset, user) and returns a filtered queryset.
ScopeFilter = Callable[[QuerySet, "User"], QuerySet]

# Role value → filter function.
ScopeRules = dict[str, ScopeFilter]


def get_user_role_name(user: User) -> str | None:
    """
    Return the user's role value, or ``None`` for anonymous users.

    Used for JWT claims, API responses and logging.
    """
    return getattr(user, "role", None) or None


def apply_role_scope(
    queryset: QuerySet,
    user: User,
    *,
    scope_rules: ScopeRules,
    default: str = "none",
) -> QuerySet:
    """
    Apply the scope rule registered for the user's role.

    Args:
        queryset:     Base (unfiltered) queryset.
        user:         The authenticated user.
        scope_rules:  Mapping of role value → ``filter_fn(qs, user)``.
        default:      What to do when the role has no rule.
                      ``"none"`` (default) → empty queryset.
                      ``"all"`` → return unfiltered.

    Returns:
        The (possibly filtered) queryset.
    """
    role_name = get_user_role_name(user)
    if role_name in scope_rules:
        return scope_rules[role_name](queryset, user)

    if default == "none":
        return queryset.none()
    return queryset


def require_role(user: User, *allowed_roles: str, message: str = "") -> None:
    """
    Guard that raises ``AuthorizationError`` if the user's role is not
    among ``allowed_roles``.

    Example::

        require_role(user, UserRole.CITIZEN, message="Only citizens can submit complaints.")
    """
    role_name = get_user_role_name(user)
    if role_name not in allowed_roles:
        raise AuthorizationError(
            message
            or (
                f"Role '{role_name}' is not permitted for this operation. "
                f"Required: {', '.join(str(r) for r in allowed_roles)}."
            )
        )
