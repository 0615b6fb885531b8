"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF ``EXCEPTION_HANDLER`` translating those exceptions.
transactions       ``transaction.atomic`` + ``select_for_update`` + versioned saves.
access             Role-scoped queryset selectors and role guards.

Usage from any app::

    from core.domain.exceptions import DomainError, TerminalStageError
    from core.domain.transactions import atomic_operation, lock_for_update
    from core.domain.access import apply_role_scope, require_role
"""
