"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the domain layer stays
framework-agnostic.  ``core.domain.exception_handler`` maps them to the
appropriate HTTP response.

Mapping cheatsheet
------------------
┌─────────────────────────────┬──────────────────────┬──────┐
│ Domain Exception            │ Parent               │ Code │
├─────────────────────────────┼──────────────────────┼──────┤
│ DomainError                 │ Exception            │ 400  │
│ ValidationError             │ DomainError          │ 400  │
│ AuthorizationError          │ DomainError          │ 403  │
│ NotFoundError               │ DomainError          │ 404  │
│ Conflict                    │ DomainError          │ 409  │
│ ConcurrentModificationError │ Conflict             │ 409  │
│ InvalidTransition           │ Conflict             │ 409  │
│ AlreadyResolvedError        │ InvalidTransition    │ 409  │
│ TerminalStageError          │ InvalidTransition    │ 409  │
│ EscalationNotAllowedError   │ InvalidTransition    │ 409  │
│ StoreError                  │ DomainError          │ 503  │
└─────────────────────────────┴──────────────────────┴──────┘

Recommended usage inside a service::

    from core.domain.exceptions import TerminalStageError

    if complaint.current_stage == ComplaintStage.KENTIBA:
        raise TerminalStageError()
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Catch this at the view boundary and convert to a 400 Bad Request.
    """

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(DomainError):
    """
    Input is structurally valid but violates a business precondition
    (e.g. empty response body, accepting a complaint with no responses,
    second-stage submission on an ineligible complaint).

    Maps to HTTP 400.
    """

    def __init__(self, message: str = "The request failed validation.") -> None:
        super().__init__(message)


class AuthorizationError(DomainError):
    """
    The authenticated user lacks the role or identity required to act on
    this complaint.

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFoundError(DomainError):
    """
    The requested complaint / office does not exist (or is not visible to
    the requesting user).

    Maps to HTTP 404.
    """

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource.

    Maps to HTTP 409.
    """

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class ConcurrentModificationError(Conflict):
    """
    Optimistic-lock failure: the record changed after the caller read it.

    The caller should reload the complaint and retry.
    """

    def __init__(self, message: str = "The complaint was modified concurrently. Reload and try again.") -> None:
        super().__init__(message)


class InvalidTransition(Conflict):
    """
    A state-machine transition that is not allowed from the current stage
    or status.

    Example::

        raise InvalidTransition(
            current="kentiba",
            target="escalate",
            reason="Kentiba Biro is the final authority.",
        )
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid state transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            if reason:
                parts.append(f"- {reason}")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason


class AlreadyResolvedError(InvalidTransition):
    """The complaint has been accepted by its citizen and is closed."""

    def __init__(self, message: str = "Cannot escalate a resolved complaint.") -> None:
        super().__init__(message)


class TerminalStageError(InvalidTransition):
    """The complaint is already at the Kentiba Biro stage."""

    def __init__(self, message: str = "Complaint is already at the final stage.") -> None:
        super().__init__(message)


class EscalationNotAllowedError(InvalidTransition):
    """Neither the due date has passed nor has the handler responded enough."""

    def __init__(
        self,
        message: str = (
            "Cannot escalate at this time. Please wait for the response due "
            "date or a response from the current handler."
        ),
    ) -> None:
        super().__init__(message)


class StoreError(DomainError):
    """
    A persistence failure aborted the operation.

    Raised by ``core.domain.transactions.atomic_operation`` when the
    database layer fails; the surrounding transaction has been rolled
    back.  Maps to HTTP 503.
    """

    def __init__(self, message: str = "The operation could not be stored. Please try again.") -> None:
        super().__init__(message)
