"""Domain enums for the match lifecycle.

Responsibilities:
  - Define Stage, MatchKind, Party and TransitionCause identifiers persisted in storage.
  - Provide stable display metadata per stage.

Invariants:
  - Enum values must remain stable for persistence and for the mirrored conversation field.
  - STAGE_METADATA must cover every Stage.
"""

from __future__ import annotations

from enum import Enum


class Stage(Enum):
    INITIAL_INTEREST = "initial_interest"
    DIALOGUE_ACTIVE = "dialogue_active"
    TRIAL_INVITED = "trial_invited"
    TRIAL_SCHEDULED = "trial_scheduled"
    TRIAL_COMPLETED = "trial_completed"
    DECISION_PENDING = "decision_pending"
    MATCH_CONFIRMED = "match_confirmed"
    MATCH_DECLINED = "match_declined"
    COMPLETED = "completed"


class MatchKind(Enum):
    PLAYER_TO_TEAM = "player_to_team"
    CHILD_TO_TEAM = "child_to_team"


class Party(Enum):
    COACH = "coach"
    PLAYER = "player"
    PARENT = "parent"


# Why a stage change happened; value is the persisted code.
class TransitionCause(Enum):
    STAGE_ADVANCE = "STAGE_ADVANCE"
    DECLINED = "DECLINED"
    CONSENSUS_REACHED = "CONSENSUS_REACHED"
    COMPLETED = "COMPLETED"


TERMINAL_STAGES: frozenset[Stage] = frozenset({Stage.MATCH_DECLINED, Stage.COMPLETED})


# UI metadata keyed by stage.
STAGE_METADATA: dict[Stage, dict[str, str]] = {
    Stage.INITIAL_INTEREST: {
        "label": "Initial Interest",
        "next_action": "Start a conversation",
    },
    Stage.DIALOGUE_ACTIVE: {
        "label": "In Discussion",
        "next_action": "Continue dialogue",
    },
    Stage.TRIAL_INVITED: {
        "label": "Trial Invited",
        "next_action": "Agree a trial date",
    },
    Stage.TRIAL_SCHEDULED: {
        "label": "Trial Scheduled",
        "next_action": "Attend the trial",
    },
    Stage.TRIAL_COMPLETED: {
        "label": "Trial Completed",
        "next_action": "Review trial and make decision",
    },
    Stage.DECISION_PENDING: {
        "label": "Awaiting Decision",
        "next_action": "Review player and make decision",
    },
    Stage.MATCH_CONFIRMED: {
        "label": "Match Confirmed",
        "next_action": "Mark the placement as completed",
    },
    Stage.MATCH_DECLINED: {
        "label": "Match Declined",
        "next_action": "",
    },
    Stage.COMPLETED: {
        "label": "Completed",
        "next_action": "",
    },
}


def is_terminal(stage: Stage) -> bool:
    return stage in TERMINAL_STAGES


def stage_label(stage: Stage) -> str:
    return STAGE_METADATA[stage]["label"]


def parse_stage(value: str) -> Stage | None:
    if not value:
        return None
    try:
        return Stage(value)
    except ValueError:
        return None


_missing = [s for s in Stage if s not in STAGE_METADATA]
if _missing:
    raise RuntimeError(f"Missing STAGE_METADATA for: {[m.value for m in _missing]}")
