"""Tests for the confirmation consensus resolver."""

from __future__ import annotations

import itertools
from dataclasses import replace

import pytest

from matchflow.core.domain.enums import MatchKind, Party, Stage, TransitionCause
from matchflow.core.domain.errors import TerminalStage, Unauthorized
from matchflow.core.domain.models import ActingParty, Match
from matchflow.core.engine.consensus import (
    CONFIRMATION_FLAGS,
    all_confirmed,
    confirm,
    resolve_confirmation_flag,
)

T0 = "2026-01-10T09:00:00+00:00"
T1 = "2026-01-11T18:30:00+00:00"
T2 = "2026-01-12T08:15:00+00:00"

COACH = ActingParty(user_id="coach-1", party=Party.COACH)
PLAYER = ActingParty(user_id="player-1", party=Party.PLAYER)
PARENT = ActingParty(user_id="parent-1", party=Party.PARENT)


def _match(
    stage: Stage = Stage.INITIAL_INTEREST,
    kind: MatchKind = MatchKind.PLAYER_TO_TEAM,
    **flags: bool,
) -> Match:
    return Match(
        id="m-1",
        kind=kind,
        stage=stage,
        coach_id="coach-1",
        conversation_id="conv-1",
        created_at=T0,
        last_activity_at=T0,
        player_id="player-1" if kind == MatchKind.PLAYER_TO_TEAM else None,
        parent_id="parent-1" if kind == MatchKind.CHILD_TO_TEAM else None,
        **flags,
    )


def test_flag_lookup_table() -> None:
    assert resolve_confirmation_flag(MatchKind.PLAYER_TO_TEAM, Party.COACH) == "coach_confirmed"
    assert resolve_confirmation_flag(MatchKind.PLAYER_TO_TEAM, Party.PLAYER) == "player_confirmed"
    assert resolve_confirmation_flag(MatchKind.CHILD_TO_TEAM, Party.COACH) == "coach_confirmed"
    assert resolve_confirmation_flag(MatchKind.CHILD_TO_TEAM, Party.PARENT) == "parent_confirmed"
    with pytest.raises(Unauthorized):
        resolve_confirmation_flag(MatchKind.PLAYER_TO_TEAM, Party.PARENT)
    with pytest.raises(Unauthorized):
        resolve_confirmation_flag(MatchKind.CHILD_TO_TEAM, Party.PLAYER)
    assert len(CONFIRMATION_FLAGS) == 4


def test_all_confirmed_truth_table() -> None:
    for kind in MatchKind:
        for coach, player, parent in itertools.product([False, True], repeat=3):
            match = _match(
                kind=kind,
                coach_confirmed=coach,
                player_confirmed=player,
                parent_confirmed=parent,
            )
            counterparty = player if kind == MatchKind.PLAYER_TO_TEAM else parent
            assert all_confirmed(match) == (coach and counterparty)


def test_coach_then_player_reaches_consensus() -> None:
    match = _match()

    first = confirm(match, COACH, True, now=T1)
    assert first.all_confirmed is False
    assert first.match.stage == Stage.INITIAL_INTEREST
    assert first.match.coach_confirmed is True
    assert first.change is None

    second = confirm(first.match, PLAYER, True, now=T2)
    assert second.all_confirmed is True
    assert second.match.stage == Stage.MATCH_CONFIRMED
    assert second.match.confirmed_at == T2
    assert second.match.completed_at is None
    assert second.change is not None
    assert second.change.cause == TransitionCause.CONSENSUS_REACHED
    assert second.change.from_stage == Stage.INITIAL_INTEREST


def test_confirmation_order_independent() -> None:
    start = _match(stage=Stage.DECISION_PENDING)
    coach_first = confirm(confirm(start, COACH, True, now=T1).match, PLAYER, True, now=T2)
    player_first = confirm(confirm(start, PLAYER, True, now=T1).match, COACH, True, now=T2)

    assert coach_first.match == player_first.match
    assert coach_first.all_confirmed and player_first.all_confirmed


def test_repeat_confirmation_is_noop() -> None:
    once = confirm(_match(), COACH, True, now=T1)
    twice = confirm(once.match, COACH, True, now=T2)

    assert twice.match == once.match
    assert twice.changed is False
    assert twice.change is None
    assert twice.all_confirmed is False


def test_repeat_after_consensus_reports_all_confirmed() -> None:
    done = confirm(confirm(_match(), COACH, True, now=T1).match, PLAYER, True, now=T2)
    again = confirm(done.match, PLAYER, True, now=T2)
    assert again.all_confirmed is True
    assert again.changed is False
    assert again.match == done.match


def test_decline_after_one_confirmation_forces_declined() -> None:
    confirmed_by_coach = confirm(_match(stage=Stage.TRIAL_COMPLETED), COACH, True, now=T1)
    declined = confirm(confirmed_by_coach.match, PLAYER, False, now=T2)

    assert declined.match.stage == Stage.MATCH_DECLINED
    assert declined.match.declined_by == Party.PLAYER
    assert declined.all_confirmed is False
    assert declined.change is not None
    assert declined.change.cause == TransitionCause.DECLINED

    with pytest.raises(TerminalStage):
        confirm(declined.match, COACH, True, now=T2)
    with pytest.raises(TerminalStage):
        confirm(declined.match, PLAYER, True, now=T2)


def test_decline_from_match_confirmed() -> None:
    done = confirm(confirm(_match(), COACH, True, now=T1).match, PLAYER, True, now=T1)
    declined = confirm(done.match, COACH, False, now=T2)
    assert declined.match.stage == Stage.MATCH_DECLINED
    assert declined.match.coach_confirmed is False


def test_repeated_decline_by_same_party_is_noop() -> None:
    declined = confirm(_match(), COACH, False, now=T1)
    retried = confirm(declined.match, COACH, False, now=T2)
    assert retried.match == declined.match
    assert retried.changed is False

    with pytest.raises(TerminalStage):
        confirm(declined.match, PLAYER, False, now=T2)


def test_child_match_rejects_player() -> None:
    match = _match(stage=Stage.DIALOGUE_ACTIVE, kind=MatchKind.CHILD_TO_TEAM)
    with pytest.raises(Unauthorized):
        confirm(match, PLAYER, True, now=T1)


def test_child_match_consensus_uses_parent_flag() -> None:
    match = _match(stage=Stage.DIALOGUE_ACTIVE, kind=MatchKind.CHILD_TO_TEAM)
    result = confirm(confirm(match, PARENT, True, now=T1).match, COACH, True, now=T2)
    assert result.all_confirmed is True
    assert result.match.parent_confirmed is True
    assert result.match.player_confirmed is False
    assert result.match.stage == Stage.MATCH_CONFIRMED


def test_wrong_user_in_right_role_rejected() -> None:
    impostor = ActingParty(user_id="player-9", party=Party.PLAYER)
    with pytest.raises(Unauthorized):
        confirm(_match(), impostor, True, now=T1)


def test_completed_match_rejects_confirmation() -> None:
    match = _match(
        stage=Stage.COMPLETED,
        coach_confirmed=True,
        player_confirmed=True,
    )
    with pytest.raises(TerminalStage):
        confirm(match, COACH, True, now=T1)
    with pytest.raises(TerminalStage):
        confirm(match, PLAYER, False, now=T1)


def test_consensus_after_manual_advance_keeps_stage() -> None:
    match = _match(stage=Stage.MATCH_CONFIRMED, coach_confirmed=True)
    result = confirm(match, PLAYER, True, now=T1)
    assert result.all_confirmed is True
    assert result.match.stage == Stage.MATCH_CONFIRMED
    assert result.match.confirmed_at == T1
    assert result.change is None


def test_confirm_decline_after_stage_decline_is_terminal() -> None:
    stage_declined = replace(
        _match(stage=Stage.MATCH_DECLINED), declined_by=Party.COACH, last_activity_at=T1
    )
    with pytest.raises(TerminalStage):
        confirm(stage_declined, COACH, False, now=T2)


def test_confirm_decline_marks_origin() -> None:
    declined = confirm(_match(stage=Stage.DIALOGUE_ACTIVE), PLAYER, False, now=T1)
    assert declined.match.declined_via_confirmation is True
    assert declined.changed is True
