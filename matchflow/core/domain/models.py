"""Domain models for matches, acting parties and stage changes.

Responsibilities:
  - Define immutable data carriers for the match record and its results.

Inputs/Outputs:
  - Match is persisted by infra layers; StageChange is appended to history.

Invariants:
  - Models carry no behavior beyond derived read-only properties.
  - completed_at is set if and only if stage == COMPLETED.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Optional

from .enums import MatchKind, Party, Stage, TransitionCause


def utc_now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


@dataclass(frozen=True)
class ActingParty:
    user_id: str
    party: Party


@dataclass(frozen=True)
class Match:
    id: str
    kind: MatchKind
    stage: Stage
    coach_id: str
    conversation_id: Optional[str]
    created_at: str
    last_activity_at: str
    player_id: Optional[str] = None
    parent_id: Optional[str] = None
    coach_confirmed: bool = False
    player_confirmed: bool = False
    parent_confirmed: bool = False
    declined_by: Optional[Party] = None
    declined_via_confirmation: bool = False
    completed_at: Optional[str] = None
    confirmed_at: Optional[str] = None
    advert_id: Optional[str] = None
    player_name: Optional[str] = None
    team_name: Optional[str] = None
    position: Optional[str] = None
    age_group: Optional[str] = None
    league: Optional[str] = None

    def participant_id(self, party: Party) -> Optional[str]:
        if party == Party.COACH:
            return self.coach_id
        if party == Party.PLAYER:
            return self.player_id
        return self.parent_id


@dataclass(frozen=True)
class StageChange:
    match_id: str
    from_stage: Stage
    to_stage: Stage
    party: Party
    cause: TransitionCause
    at: str


@dataclass(frozen=True)
class TransitionOutcome:
    match: Match
    change: Optional[StageChange]
    changed: bool


@dataclass(frozen=True)
class ConfirmationResult:
    match: Match
    all_confirmed: bool
    change: Optional[StageChange]
    changed: bool
