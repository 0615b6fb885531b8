"""
complaints.workflow — Escalation state machine as data.

The stage order and every legal transition are declared in
``TRANSITIONS``; services look transitions up here instead of branching
per stage.  Nothing in this module touches the database, so the table and
the eligibility rule can be exercised directly.

Transition table
----------------
::

    stakeholder_first   → stakeholder_second   stakeholder_office           3d
    stakeholder_second  → wereda_first         wereda_anti_corruption       5d  (crosses)
    wereda_first        → wereda_second        wereda_anti_corruption       5d
    wereda_second       → kifleketema_first    kifleketema_anti_corruption  7d  (crosses)
    kifleketema_first   → kifleketema_second   kifleketema_anti_corruption  7d
    kifleketema_second  → kentiba              kentiba_biro                 –   (crosses)

``kentiba`` is terminal and has no entry.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass

from core.constants import ESCALATION_TIMEFRAMES
from core.domain.exceptions import TerminalStageError

from .models import ComplaintHandler, ComplaintStage, ComplaintStatus


# ═══════════════════════════════════════════════════════════════════
#  Stage order
# ═══════════════════════════════════════════════════════════════════

#: All stages, lowest to highest.  The index doubles as the number of
#: responses beyond which a complaint becomes eligible for escalation.
STAGE_ORDER: tuple[str, ...] = (
    ComplaintStage.STAKEHOLDER_FIRST,
    ComplaintStage.STAKEHOLDER_SECOND,
    ComplaintStage.WEREDA_FIRST,
    ComplaintStage.WEREDA_SECOND,
    ComplaintStage.KIFLEKETEMA_FIRST,
    ComplaintStage.KIFLEKETEMA_SECOND,
    ComplaintStage.KENTIBA,
)

TERMINAL_STAGE: str = ComplaintStage.KENTIBA

#: Handler responsible for each stage.
STAGE_HANDLERS: dict[str, str] = {
    ComplaintStage.STAKEHOLDER_FIRST: ComplaintHandler.STAKEHOLDER_OFFICE,
    ComplaintStage.STAKEHOLDER_SECOND: ComplaintHandler.STAKEHOLDER_OFFICE,
    ComplaintStage.WEREDA_FIRST: ComplaintHandler.WEREDA_ANTI_CORRUPTION,
    ComplaintStage.WEREDA_SECOND: ComplaintHandler.WEREDA_ANTI_CORRUPTION,
    ComplaintStage.KIFLEKETEMA_FIRST: ComplaintHandler.KIFLEKETEMA_ANTI_CORRUPTION,
    ComplaintStage.KIFLEKETEMA_SECOND: ComplaintHandler.KIFLEKETEMA_ANTI_CORRUPTION,
    ComplaintStage.KENTIBA: ComplaintHandler.KENTIBA_BIRO,
}

#: First-stage → second-stage mapping used by citizen second-stage
#: submissions.  Only these stages accept one.
SECOND_STAGE_OF: dict[str, str] = {
    ComplaintStage.STAKEHOLDER_FIRST: ComplaintStage.STAKEHOLDER_SECOND,
    ComplaintStage.WEREDA_FIRST: ComplaintStage.WEREDA_SECOND,
}


# ═══════════════════════════════════════════════════════════════════
#  Transition table
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StageTransition:
    """One row of the escalation table."""

    from_stage: str
    next_stage: str
    next_handler: str
    crosses_handler: bool

    @property
    def from_handler(self) -> str:
        return STAGE_HANDLERS[self.from_stage]

    @property
    def due_timeframe(self) -> datetime.timedelta | None:
        """Response window of the next handler; ``None`` at the top."""
        return ESCALATION_TIMEFRAMES.get(self.next_handler)


def _build_transitions() -> dict[str, StageTransition]:
    table = {}
    for current, following in zip(STAGE_ORDER, STAGE_ORDER[1:]):
        table[current] = StageTransition(
            from_stage=current,
            next_stage=following,
            next_handler=STAGE_HANDLERS[following],
            crosses_handler=STAGE_HANDLERS[current] != STAGE_HANDLERS[following],
        )
    return table


#: stage → ``StageTransition`` for the six non-terminal stages.
TRANSITIONS: dict[str, StageTransition] = _build_transitions()


# ═══════════════════════════════════════════════════════════════════
#  Queries on the table
# ═══════════════════════════════════════════════════════════════════

def stage_index(stage: str) -> int:
    """Position of ``stage`` in ``STAGE_ORDER`` (``ValueError`` if unknown)."""
    return STAGE_ORDER.index(stage)


def next_transition(stage: str) -> StageTransition:
    """
    Return the transition out of ``stage``.

    Raises:
        TerminalStageError: ``stage`` is the terminal stage.
    """
    try:
        return TRANSITIONS[stage]
    except KeyError:
        raise TerminalStageError() from None


def timeframe_for(handler: str) -> datetime.timedelta | None:
    return ESCALATION_TIMEFRAMES.get(handler)


def can_escalate(
    *,
    stage: str,
    due_at: datetime.datetime | None,
    response_count: int,
    status: str,
    now: datetime.datetime,
) -> bool:
    """
    Eligibility rule for a citizen-initiated escalation.

    A complaint may be escalated when its current stage's due date has
    passed, or when it has more responses than the stage's index and is
    not resolved.  A missing due date never satisfies the time rule.
    """
    overdue = due_at is not None and now > due_at
    answered = (
        response_count > stage_index(stage)
        and status != ComplaintStatus.RESOLVED
    )
    return overdue or answered
