"""Stage transition validation for a single match.

Responsibilities:
  - Answer whether a stage move is legal according to ALLOWED_TRANSITIONS.
  - Apply a requested move to an immutable Match and describe the change.

Inputs/Outputs:
  - Inputs: current Match, requested target Stage, ActingParty.
  - Outputs: TransitionOutcome carrying the updated Match and optional StageChange.

Invariants:
  - Pure; no persistence and no clock reads beyond the optional ``now`` default.
  - Requesting the current stage again is a no-op, not an error.
"""

from __future__ import annotations

from dataclasses import replace

from ..domain.enums import Party, Stage, TransitionCause, is_terminal
from ..domain.errors import InvalidTransition, TerminalStage, Unauthorized
from ..domain.models import ActingParty, Match, StageChange, TransitionOutcome, utc_now_iso
from ..domain.transition_graph import ALLOWED_TRANSITIONS, STAGE_ORDER


def can_transition(current: Stage, target: Stage) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def next_stages(current: Stage) -> list[Stage]:
    allowed = ALLOWED_TRANSITIONS[current]
    return [stage for stage in STAGE_ORDER if stage in allowed]


def ensure_participant(match: Match, acting: ActingParty) -> None:
    expected = match.participant_id(acting.party)
    if expected is None or expected != acting.user_id:
        raise Unauthorized(
            f"User {acting.user_id} is not the {acting.party.value} on match {match.id}"
        )


def _cause_for(target: Stage) -> TransitionCause:
    if target == Stage.MATCH_DECLINED:
        return TransitionCause.DECLINED
    if target == Stage.COMPLETED:
        return TransitionCause.COMPLETED
    return TransitionCause.STAGE_ADVANCE


def apply_transition(
    match: Match,
    target: Stage,
    acting: ActingParty,
    now: str | None = None,
) -> TransitionOutcome:
    ensure_participant(match, acting)

    if is_terminal(match.stage):
        raise TerminalStage(match.id, match.stage.value)

    if target == match.stage:
        return TransitionOutcome(match=match, change=None, changed=False)

    if not can_transition(match.stage, target):
        raise InvalidTransition(match.stage.value, target.value)

    at = now or utc_now_iso()
    declined_by: Party | None = match.declined_by
    if target == Stage.MATCH_DECLINED:
        declined_by = acting.party

    updated = replace(
        match,
        stage=target,
        last_activity_at=at,
        declined_by=declined_by,
        completed_at=at if target == Stage.COMPLETED else None,
    )
    change = StageChange(
        match_id=match.id,
        from_stage=match.stage,
        to_stage=target,
        party=acting.party,
        cause=_cause_for(target),
        at=at,
    )
    return TransitionOutcome(match=updated, change=change, changed=True)
