"""Request handlers for the two engine request shapes.

Each handler returns ``(status_code, payload)``; transports only render it.
Domain errors map to their declared status code with an ``{"error", "reason"}``
body. Store failures (``sqlite3.Error``) are not caught here.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from matchflow.core.domain.enums import stage_label
from matchflow.core.domain.errors import MatchError
from matchflow.core.domain.models import ActingParty, Match
from matchflow.core.engine.transitions import next_stages
from .dto import BodyError, ConfirmRequest, StageRequest, change_to_dict, match_to_dict
from .store import MatchRecordStore

logger = logging.getLogger(__name__)

Response = tuple[int, dict[str, Any]]


def error_body(message: str, reason: str) -> dict[str, Any]:
    return {"error": message, "reason": reason}


def _guard(action: Callable[[], Response]) -> Response:
    try:
        return action()
    except BodyError as exc:
        return 400, error_body(exc.message, exc.reason)
    except MatchError as exc:
        logger.info("request rejected reason=%s message=%s", exc.reason, exc.message)
        return exc.status_code, error_body(exc.message, exc.reason)


def handle_stage_request(
    store: MatchRecordStore,
    match_id: str,
    body: Mapping[str, Any] | None,
    acting: ActingParty,
) -> Response:
    def action() -> Response:
        request = StageRequest.from_body(body)
        match = store.apply_stage_transition(match_id, request.target, acting)
        return 200, match_to_dict(match)

    return _guard(action)


def handle_conversation_stage_request(
    store: MatchRecordStore,
    conversation_id: str,
    body: Mapping[str, Any] | None,
    acting: ActingParty,
) -> Response:
    def action() -> Response:
        request = StageRequest.from_body(body)
        match = store.apply_stage_transition_by_conversation(conversation_id, request.target, acting)
        return 200, match_to_dict(match)

    return _guard(action)


def handle_confirm_request(
    store: MatchRecordStore,
    match_id: str,
    body: Mapping[str, Any] | None,
    acting: ActingParty,
) -> Response:
    def action() -> Response:
        request = ConfirmRequest.from_body(body)
        result = store.apply_confirmation(match_id, acting, request.confirmed)
        return 200, {"match": match_to_dict(result.match), "allConfirmed": result.all_confirmed}

    return _guard(action)


def _visible_to(match: Match, acting: ActingParty) -> bool:
    return match.participant_id(acting.party) == acting.user_id


def handle_get_match(store: MatchRecordStore, match_id: str, acting: ActingParty) -> Response:
    def action() -> Response:
        match = store.get(match_id)
        if not _visible_to(match, acting):
            return 403, error_body("Access denied to this match", "UNAUTHORIZED")
        payload = match_to_dict(match)
        payload["history"] = [change_to_dict(change) for change in store.history(match_id)]
        return 200, payload

    return _guard(action)


def handle_next_stages(store: MatchRecordStore, match_id: str, acting: ActingParty) -> Response:
    def action() -> Response:
        match = store.get(match_id)
        if not _visible_to(match, acting):
            return 403, error_body("Access denied to this match", "UNAUTHORIZED")
        stages = [
            {"stage": stage.value, "label": stage_label(stage)} for stage in next_stages(match.stage)
        ]
        return 200, {"matchProgressStage": match.stage.value, "nextStages": stages}

    return _guard(action)


def handle_list_matches(store: MatchRecordStore, acting: ActingParty) -> Response:
    matches = store.list_for_party(acting.user_id, acting.party)
    return 200, {"matches": [match_to_dict(match) for match in matches]}


def handle_conversation_context(store: MatchRecordStore, match_id: str, acting: ActingParty) -> Response:
    def action() -> Response:
        match = store.get(match_id)
        if not _visible_to(match, acting):
            return 403, error_body("Access denied to this match", "UNAUTHORIZED")
        return 200, store.binding.context(match)

    return _guard(action)
