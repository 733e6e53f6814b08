"""FastAPI surface for the match lifecycle engine.

Run with the serve CLI: python -m matchflow.cli.serve_api --db matchflow.db

The identity layer sits in front of this app and forwards the resolved actor
as ``X-User-Id`` / ``X-User-Role`` headers.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from matchflow.app_api.dashboard import dashboard_rows, summarize_matches
from matchflow.app_api.dto import parse_party
from matchflow.app_api.handlers import (
    Response,
    handle_confirm_request,
    handle_conversation_context,
    handle_conversation_stage_request,
    handle_get_match,
    handle_list_matches,
    handle_next_stages,
    handle_stage_request,
)
from matchflow.app_api.store import MatchRecordStore
from matchflow.core.domain.models import ActingParty


def acting_party(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> ActingParty:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    party = parse_party(x_user_role)
    if party is None:
        raise HTTPException(status_code=403, detail=f"Role not allowed: {x_user_role}")
    return ActingParty(user_id=x_user_id, party=party)


def _render(response: Response) -> JSONResponse:
    status_code, payload = response
    return JSONResponse(status_code=status_code, content=payload)


def create_app(store: MatchRecordStore) -> FastAPI:
    app = FastAPI(
        title="Matchflow",
        description="Match lifecycle engine: stage transitions and two-party confirmation",
        version="0.1.0",
    )

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.get("/matches")
    def list_matches(acting: ActingParty = Depends(acting_party)) -> JSONResponse:
        return _render(handle_list_matches(store, acting))

    @app.get("/matches/dashboard")
    def dashboard(acting: ActingParty = Depends(acting_party)) -> dict[str, Any]:
        matches = store.list_for_party(acting.user_id, acting.party)
        summary = summarize_matches(matches)
        return {
            "matches": dashboard_rows(matches, acting.party),
            "summary": {
                "total": summary.total,
                "stageCounts": summary.stage_counts,
                "openCount": summary.open_count,
                "confirmedCount": summary.confirmed_count,
                "declinedCount": summary.declined_count,
                "completedCount": summary.completed_count,
                "confirmationRate": summary.confirmation_rate,
                "hoursToConfirmMedian": summary.hours_to_confirm_median,
                "hoursToConfirmP90": summary.hours_to_confirm_p90,
            },
        }

    @app.get("/matches/{match_id}")
    def get_match(match_id: str, acting: ActingParty = Depends(acting_party)) -> JSONResponse:
        return _render(handle_get_match(store, match_id, acting))

    @app.get("/matches/{match_id}/next-stages")
    def get_next_stages(match_id: str, acting: ActingParty = Depends(acting_party)) -> JSONResponse:
        return _render(handle_next_stages(store, match_id, acting))

    @app.get("/matches/{match_id}/conversation")
    def get_conversation(match_id: str, acting: ActingParty = Depends(acting_party)) -> JSONResponse:
        return _render(handle_conversation_context(store, match_id, acting))

    @app.put("/matches/{match_id}/stage")
    def put_stage(
        match_id: str,
        body: Any = Body(default=None),
        acting: ActingParty = Depends(acting_party),
    ) -> JSONResponse:
        return _render(handle_stage_request(store, match_id, body, acting))

    @app.put("/conversations/{conversation_id}/match-progress")
    def put_conversation_stage(
        conversation_id: str,
        body: Any = Body(default=None),
        acting: ActingParty = Depends(acting_party),
    ) -> JSONResponse:
        return _render(handle_conversation_stage_request(store, conversation_id, body, acting))

    @app.put("/matches/{match_id}/confirm")
    def put_confirm(
        match_id: str,
        body: Any = Body(default=None),
        acting: ActingParty = Depends(acting_party),
    ) -> JSONResponse:
        return _render(handle_confirm_request(store, match_id, body, acting))

    return app
