"""DTO definitions for data crossing the request boundary.

Responsibilities:
  - Parse request bodies into typed values.
  - Render Match and StageChange as JSON-ready dictionaries.
Must not:
  - Implement business logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from matchflow.core.domain.enums import Party, Stage, stage_label
from matchflow.core.domain.models import Match, StageChange


class BodyError(ValueError):
    """Malformed request body; reported as 400."""

    def __init__(self, message: str, reason: str = "INVALID_BODY") -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason


@dataclass(frozen=True)
class StageRequest:
    target: Stage

    @classmethod
    def from_body(cls, body: Mapping[str, Any] | None) -> "StageRequest":
        if not isinstance(body, Mapping):
            raise BodyError("Request body must be a JSON object")
        raw = body.get("matchProgressStage")
        if not isinstance(raw, str) or not raw:
            raise BodyError("matchProgressStage is required")
        try:
            target = Stage(raw)
        except ValueError:
            raise BodyError(f"Unknown stage: {raw}", reason="INVALID_STAGE") from None
        return cls(target=target)


@dataclass(frozen=True)
class ConfirmRequest:
    confirmed: bool

    @classmethod
    def from_body(cls, body: Mapping[str, Any] | None) -> "ConfirmRequest":
        if not isinstance(body, Mapping):
            raise BodyError("Request body must be a JSON object")
        raw = body.get("confirmed")
        if not isinstance(raw, bool):
            raise BodyError("confirmed must be a boolean")
        return cls(confirmed=raw)


def parse_party(value: str | None) -> Party | None:
    if not value:
        return None
    normalized = value.strip().lower()
    # Role names used by the account system.
    if normalized == "parent/guardian":
        normalized = "parent"
    try:
        return Party(normalized)
    except ValueError:
        return None


def match_to_dict(match: Match) -> dict[str, Any]:
    return {
        "id": match.id,
        "kind": match.kind.value,
        "matchProgressStage": match.stage.value,
        "stageLabel": stage_label(match.stage),
        "conversationId": match.conversation_id,
        "coachId": match.coach_id,
        "playerId": match.player_id,
        "parentId": match.parent_id,
        "coachConfirmed": match.coach_confirmed,
        "playerConfirmed": match.player_confirmed,
        "parentConfirmed": match.parent_confirmed,
        "declinedBy": match.declined_by.value if match.declined_by else None,
        "createdAt": match.created_at,
        "lastActivityAt": match.last_activity_at,
        "confirmedAt": match.confirmed_at,
        "completedAt": match.completed_at,
        "advertId": match.advert_id,
        "playerName": match.player_name,
        "teamName": match.team_name,
        "position": match.position,
        "ageGroup": match.age_group,
        "league": match.league,
    }


def change_to_dict(change: StageChange) -> dict[str, Any]:
    return {
        "matchId": change.match_id,
        "fromStage": change.from_stage.value,
        "toStage": change.to_stage.value,
        "party": change.party.value,
        "cause": change.cause.value,
        "at": change.at,
    }
