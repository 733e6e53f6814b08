"""Tests for applying stage transitions to a match value."""

from __future__ import annotations

import pytest

from matchflow.core.domain.enums import MatchKind, Party, Stage, TransitionCause, is_terminal
from matchflow.core.domain.errors import InvalidTransition, TerminalStage, Unauthorized
from matchflow.core.domain.models import ActingParty, Match
from matchflow.core.engine.transitions import apply_transition, can_transition

T0 = "2026-01-10T09:00:00+00:00"
T1 = "2026-01-11T18:30:00+00:00"

COACH = ActingParty(user_id="coach-1", party=Party.COACH)
PLAYER = ActingParty(user_id="player-1", party=Party.PLAYER)


def _match(stage: Stage, kind: MatchKind = MatchKind.PLAYER_TO_TEAM) -> Match:
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
    )


def test_every_pair_succeeds_iff_legal() -> None:
    for current in Stage:
        for target in Stage:
            match = _match(current)
            if is_terminal(current):
                with pytest.raises(TerminalStage):
                    apply_transition(match, target, COACH, now=T1)
            elif target == current:
                outcome = apply_transition(match, target, COACH, now=T1)
                assert outcome.match == match
                assert outcome.change is None
            elif can_transition(current, target):
                outcome = apply_transition(match, target, COACH, now=T1)
                assert outcome.match.stage == target
                assert outcome.match.last_activity_at == T1
            else:
                with pytest.raises(InvalidTransition):
                    apply_transition(match, target, COACH, now=T1)


def test_trial_scheduled_to_match_confirmed_rejected() -> None:
    match = _match(Stage.TRIAL_SCHEDULED)
    with pytest.raises(InvalidTransition) as exc_info:
        apply_transition(match, Stage.MATCH_CONFIRMED, COACH, now=T1)
    assert exc_info.value.current == "trial_scheduled"
    assert exc_info.value.target == "match_confirmed"
    assert exc_info.value.reason == "INVALID_TRANSITION"


def test_completed_sets_completed_at_and_is_terminal() -> None:
    match = _match(Stage.MATCH_CONFIRMED)
    outcome = apply_transition(match, Stage.COMPLETED, COACH, now=T1)

    assert outcome.match.stage == Stage.COMPLETED
    assert outcome.match.completed_at == T1
    assert outcome.change is not None
    assert outcome.change.cause == TransitionCause.COMPLETED
    with pytest.raises(TerminalStage):
        apply_transition(outcome.match, Stage.MATCH_DECLINED, PLAYER, now=T1)


def test_completed_at_unset_for_other_stages() -> None:
    outcome = apply_transition(_match(Stage.INITIAL_INTEREST), Stage.DIALOGUE_ACTIVE, PLAYER, now=T1)
    assert outcome.match.completed_at is None
    assert outcome.change is not None
    assert outcome.change.cause == TransitionCause.STAGE_ADVANCE
    assert outcome.change.party == Party.PLAYER


def test_any_participant_may_decline_and_is_recorded() -> None:
    outcome = apply_transition(_match(Stage.TRIAL_INVITED), Stage.MATCH_DECLINED, PLAYER, now=T1)
    assert outcome.match.stage == Stage.MATCH_DECLINED
    assert outcome.match.declined_by == Party.PLAYER
    assert outcome.match.declined_via_confirmation is False
    assert outcome.changed is True
    assert outcome.change is not None
    assert outcome.change.cause == TransitionCause.DECLINED


def test_non_participant_rejected() -> None:
    stranger = ActingParty(user_id="coach-2", party=Party.COACH)
    with pytest.raises(Unauthorized):
        apply_transition(_match(Stage.DIALOGUE_ACTIVE), Stage.TRIAL_INVITED, stranger, now=T1)


def test_role_absent_from_match_rejected() -> None:
    parent = ActingParty(user_id="parent-1", party=Party.PARENT)
    with pytest.raises(Unauthorized):
        apply_transition(_match(Stage.DIALOGUE_ACTIVE), Stage.MATCH_DECLINED, parent, now=T1)


def test_repeat_of_current_stage_is_noop() -> None:
    match = _match(Stage.TRIAL_SCHEDULED)
    outcome = apply_transition(match, Stage.TRIAL_SCHEDULED, PLAYER, now=T1)
    assert outcome.match is match
    assert outcome.change is None
    assert outcome.changed is False
