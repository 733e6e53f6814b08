"""Notification events emitted after committed match changes."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from matchflow.core.domain.enums import Stage

logger = logging.getLogger(__name__)

EVENT_STAGE_CHANGED = "stage_changed"
EVENT_CONFIRMATION_RECORDED = "confirmation_recorded"
EVENT_MATCH_CONFIRMED = "match_confirmed"
EVENT_MATCH_DECLINED = "match_declined"
EVENT_MATCH_COMPLETED = "match_completed"


def event_name(previous_stage: Stage, new_stage: Stage) -> str:
    if previous_stage == new_stage:
        return EVENT_CONFIRMATION_RECORDED
    if new_stage == Stage.MATCH_CONFIRMED:
        return EVENT_MATCH_CONFIRMED
    if new_stage == Stage.MATCH_DECLINED:
        return EVENT_MATCH_DECLINED
    if new_stage == Stage.COMPLETED:
        return EVENT_MATCH_COMPLETED
    return EVENT_STAGE_CHANGED


def build_event(match_id: str, previous_stage: Stage, new_stage: Stage) -> dict[str, Any]:
    return {
        "matchId": match_id,
        "event": event_name(previous_stage, new_stage),
        "previousStage": previous_stage.value,
        "newStage": new_stage.value,
    }


class LoggingNotificationDispatcher:
    """Default dispatcher: records events in the log."""

    def dispatch(self, match_id: str, event: Mapping[str, Any]) -> None:
        logger.info("match event match_id=%s event=%s", match_id, event.get("event"))
