"""Read-only projections over matches for dashboards.

Responsibilities:
  - Build per-party dashboard rows with the next action and outstanding confirmations.
  - Summarize a set of matches into a stage funnel and time-to-confirmation statistics.
Must not:
  - Mutate matches.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import numpy as np

from matchflow.core.domain.enums import STAGE_METADATA, Party, Stage, is_terminal, stage_label
from matchflow.core.domain.models import Match
from matchflow.core.engine.consensus import COUNTERPARTY, counterparty_confirmed


@dataclass(frozen=True)
class MatchSummary:
    total: int
    stage_counts: dict[str, int]
    open_count: int
    confirmed_count: int
    declined_count: int
    completed_count: int
    confirmation_rate: float
    hours_to_confirm_median: Optional[float]
    hours_to_confirm_p90: Optional[float]


def pending_confirmations(match: Match) -> list[Party]:
    if is_terminal(match.stage):
        return []
    pending: list[Party] = []
    if not match.coach_confirmed:
        pending.append(Party.COACH)
    if not counterparty_confirmed(match):
        pending.append(COUNTERPARTY[match.kind])
    return pending


def dashboard_rows(matches: Iterable[Match], party: Party) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for match in matches:
        pending = pending_confirmations(match)
        rows.append(
            {
                "id": match.id,
                "conversationId": match.conversation_id,
                "stage": match.stage.value,
                "stageLabel": stage_label(match.stage),
                "playerName": match.player_name,
                "teamName": match.team_name,
                "position": match.position,
                "ageGroup": match.age_group,
                "lastActivity": match.last_activity_at,
                "nextAction": STAGE_METADATA[match.stage]["next_action"],
                "awaitingYourConfirmation": party in pending,
                "awaitingConfirmationFrom": [p.value for p in pending],
            }
        )
    return rows


def _hours_between(start: str, end: str) -> float:
    started = datetime.datetime.fromisoformat(start)
    ended = datetime.datetime.fromisoformat(end)
    return (ended - started).total_seconds() / 3600.0


def summarize_matches(matches: Iterable[Match]) -> MatchSummary:
    items = list(matches)
    stage_counts = {stage.value: 0 for stage in Stage}
    for match in items:
        stage_counts[match.stage.value] += 1

    confirmed = [m for m in items if m.confirmed_at is not None]
    hours = np.array(
        [_hours_between(m.created_at, m.confirmed_at) for m in confirmed if m.confirmed_at],
        dtype=float,
    )
    median: Optional[float] = None
    p90: Optional[float] = None
    if hours.size > 0:
        median = float(np.median(hours))
        p90 = float(np.quantile(hours, 0.9))

    total = len(items)
    return MatchSummary(
        total=total,
        stage_counts=stage_counts,
        open_count=sum(1 for m in items if not is_terminal(m.stage)),
        confirmed_count=len(confirmed),
        declined_count=stage_counts[Stage.MATCH_DECLINED.value],
        completed_count=stage_counts[Stage.COMPLETED.value],
        confirmation_rate=(len(confirmed) / total) if total else 0.0,
        hours_to_confirm_median=median,
        hours_to_confirm_p90=p90,
    )
