"""Allowed stage transitions for the match lifecycle.

Responsibilities:
  - Define legal next stages per current stage.
  - The transition validator and the store must respect this graph.

Invariants:
  - Directional only; there are no backward edges.
  - Terminal stages map to an empty set.
  - MATCH_DECLINED is a successor of every non-terminal stage.
  - COMPLETED is reachable only from MATCH_CONFIRMED.
"""

from __future__ import annotations

from .enums import Stage

ALLOWED_TRANSITIONS: dict[Stage, frozenset[Stage]] = {
    Stage.INITIAL_INTEREST: frozenset({Stage.DIALOGUE_ACTIVE, Stage.MATCH_DECLINED}),
    Stage.DIALOGUE_ACTIVE: frozenset(
        {Stage.TRIAL_INVITED, Stage.DECISION_PENDING, Stage.MATCH_DECLINED}
    ),
    Stage.TRIAL_INVITED: frozenset({Stage.TRIAL_SCHEDULED, Stage.MATCH_DECLINED}),
    Stage.TRIAL_SCHEDULED: frozenset({Stage.TRIAL_COMPLETED, Stage.MATCH_DECLINED}),
    Stage.TRIAL_COMPLETED: frozenset(
        {Stage.MATCH_CONFIRMED, Stage.DECISION_PENDING, Stage.MATCH_DECLINED}
    ),
    Stage.DECISION_PENDING: frozenset({Stage.MATCH_CONFIRMED, Stage.MATCH_DECLINED}),
    Stage.MATCH_CONFIRMED: frozenset({Stage.COMPLETED, Stage.MATCH_DECLINED}),
    Stage.MATCH_DECLINED: frozenset(),
    Stage.COMPLETED: frozenset(),
}

# Presentation order for successor lists; follows the forward progression.
STAGE_ORDER: tuple[Stage, ...] = (
    Stage.INITIAL_INTEREST,
    Stage.DIALOGUE_ACTIVE,
    Stage.TRIAL_INVITED,
    Stage.TRIAL_SCHEDULED,
    Stage.TRIAL_COMPLETED,
    Stage.DECISION_PENDING,
    Stage.MATCH_CONFIRMED,
    Stage.COMPLETED,
    Stage.MATCH_DECLINED,
)

_missing = [s for s in Stage if s not in ALLOWED_TRANSITIONS]
if _missing:
    raise RuntimeError(f"Missing ALLOWED_TRANSITIONS for: {[m.value for m in _missing]}")
