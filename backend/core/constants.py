"""
Core constants — **Single Source of Truth** for project-wide magic numbers.

Any business rule that references a numeric constant should import it
from here instead of hardcoding.  This avoids drift between apps that use
the same value (e.g. the complaints engine and the dashboard both need
the escalation timeframes).
"""

from datetime import timedelta

# ── Escalation timeframes ───────────────────────────────────────────
# Response window granted to each handler tier once a stage becomes
# active.  Keyed by handler value (see ``complaints.models.ComplaintHandler``).
# Kentiba Biro is the terminal authority and has no window.
STAKEHOLDER_RESPONSE_WINDOW: timedelta = timedelta(days=3)
WEREDA_RESPONSE_WINDOW: timedelta = timedelta(days=5)
KIFLEKETEMA_RESPONSE_WINDOW: timedelta = timedelta(days=7)

ESCALATION_TIMEFRAMES: dict[str, timedelta] = {
    "stakeholder_office": STAKEHOLDER_RESPONSE_WINDOW,
    "wereda_anti_corruption": WEREDA_RESPONSE_WINDOW,
    "kifleketema_anti_corruption": KIFLEKETEMA_RESPONSE_WINDOW,
}

# ── Submission limits ───────────────────────────────────────────────
MAX_ATTACHMENTS_PER_COMPLAINT: int = 5

# ── Listing ─────────────────────────────────────────────────────────
DEFAULT_PAGE_SIZE: int = 10
MAX_PAGE_SIZE: int = 100

# ── Default escalation reasons ──────────────────────────────────────
DEFAULT_CROSS_HANDLER_REASON: str = "Escalated due to unresolved complaint"
DEFAULT_WITHIN_HANDLER_REASON: str = "Escalated to next stage"
SECOND_STAGE_REASON: str = "Escalated to second stage by citizen"
