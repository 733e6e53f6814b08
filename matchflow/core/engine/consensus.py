"""Confirmation consensus for a single match.

Responsibilities:
  - Map (kind, party) to the confirmation flag that party owns.
  - Record a confirm or decline and derive whether both required parties agreed.
  - Force MATCH_CONFIRMED when consensus is first observed, MATCH_DECLINED on decline.

Inputs/Outputs:
  - Inputs: current Match, ActingParty, confirmed flag.
  - Outputs: ConfirmationResult with the updated Match, all_confirmed, and optional StageChange.

Invariants:
  - Pure; callers must serialize calls per match so the read-modify-write is atomic.
  - A decline is final; re-confirming afterwards fails with TerminalStage. Only a
    repeated confirm(false) by the party whose confirm(false) declined it is a no-op.
  - Repeating the same confirmation is a no-op that returns the match unchanged.
"""

from __future__ import annotations

from dataclasses import replace

from ..domain.enums import MatchKind, Party, Stage, TransitionCause, is_terminal
from ..domain.errors import TerminalStage, Unauthorized
from ..domain.models import ActingParty, ConfirmationResult, Match, StageChange, utc_now_iso
from .transitions import ensure_participant

# Counterparty whose agreement is required alongside the coach.
COUNTERPARTY: dict[MatchKind, Party] = {
    MatchKind.PLAYER_TO_TEAM: Party.PLAYER,
    MatchKind.CHILD_TO_TEAM: Party.PARENT,
}

# (kind, acting party) -> Match attribute holding that party's confirmation.
CONFIRMATION_FLAGS: dict[tuple[MatchKind, Party], str] = {
    (MatchKind.PLAYER_TO_TEAM, Party.COACH): "coach_confirmed",
    (MatchKind.PLAYER_TO_TEAM, Party.PLAYER): "player_confirmed",
    (MatchKind.CHILD_TO_TEAM, Party.COACH): "coach_confirmed",
    (MatchKind.CHILD_TO_TEAM, Party.PARENT): "parent_confirmed",
}


def resolve_confirmation_flag(kind: MatchKind, party: Party) -> str:
    flag = CONFIRMATION_FLAGS.get((kind, party))
    if flag is None:
        raise Unauthorized(f"A {party.value} cannot confirm a {kind.value} match")
    return flag


def counterparty_confirmed(match: Match) -> bool:
    if COUNTERPARTY[match.kind] == Party.PLAYER:
        return match.player_confirmed
    return match.parent_confirmed


def all_confirmed(match: Match) -> bool:
    return match.coach_confirmed and counterparty_confirmed(match)


def confirm(
    match: Match,
    acting: ActingParty,
    confirmed: bool,
    now: str | None = None,
) -> ConfirmationResult:
    flag = resolve_confirmation_flag(match.kind, acting.party)
    ensure_participant(match, acting)

    if is_terminal(match.stage):
        # Retried confirm(false) from the party that declined through confirm.
        if (
            match.stage == Stage.MATCH_DECLINED
            and match.declined_via_confirmation
            and not confirmed
            and match.declined_by == acting.party
        ):
            return ConfirmationResult(match=match, all_confirmed=False, change=None, changed=False)
        raise TerminalStage(match.id, match.stage.value)

    if confirmed and getattr(match, flag):
        return ConfirmationResult(
            match=match, all_confirmed=all_confirmed(match), change=None, changed=False
        )

    at = now or utc_now_iso()

    if not confirmed:
        updated = replace(
            match,
            stage=Stage.MATCH_DECLINED,
            declined_by=acting.party,
            declined_via_confirmation=True,
            last_activity_at=at,
            **{flag: False},
        )
        change = StageChange(
            match_id=match.id,
            from_stage=match.stage,
            to_stage=Stage.MATCH_DECLINED,
            party=acting.party,
            cause=TransitionCause.DECLINED,
            at=at,
        )
        return ConfirmationResult(match=updated, all_confirmed=False, change=change, changed=True)

    updated = replace(match, last_activity_at=at, **{flag: True})
    if not all_confirmed(updated):
        return ConfirmationResult(match=updated, all_confirmed=False, change=None, changed=True)

    if updated.stage == Stage.MATCH_CONFIRMED:
        # Stage was advanced by hand before the second confirmation arrived.
        updated = replace(updated, confirmed_at=updated.confirmed_at or at)
        return ConfirmationResult(match=updated, all_confirmed=True, change=None, changed=True)

    updated = replace(updated, stage=Stage.MATCH_CONFIRMED, confirmed_at=at)
    change = StageChange(
        match_id=match.id,
        from_stage=match.stage,
        to_stage=Stage.MATCH_CONFIRMED,
        party=acting.party,
        cause=TransitionCause.CONSENSUS_REACHED,
        at=at,
    )
    return ConfirmationResult(match=updated, all_confirmed=True, change=change, changed=True)
