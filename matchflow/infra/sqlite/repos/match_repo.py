"""SQLite repository for match_record and match_transition persistence.

Responsibilities:
  - Insert/update match rows and append transition rows.
  - Map rows to immutable Match values.
Must not:
  - Validate stage moves or confirmations; persistence only.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from matchflow.core.domain.enums import MatchKind, Party, Stage, TransitionCause
from matchflow.core.domain.models import Match, StageChange

_MATCH_COLUMNS = (
    "match_id",
    "kind",
    "stage",
    "coach_id",
    "player_id",
    "parent_id",
    "conversation_id",
    "coach_confirmed",
    "player_confirmed",
    "parent_confirmed",
    "declined_by",
    "declined_via_confirmation",
    "created_at",
    "last_activity_at",
    "confirmed_at",
    "completed_at",
    "advert_id",
    "player_name",
    "team_name",
    "position",
    "age_group",
    "league",
)

_SELECT_MATCH = f"SELECT {', '.join(_MATCH_COLUMNS)} FROM match_record"


def _row_to_match(row: sqlite3.Row | tuple) -> Match:
    values = dict(zip(_MATCH_COLUMNS, tuple(row)))
    declined_by = values["declined_by"]
    return Match(
        id=values["match_id"],
        kind=MatchKind(values["kind"]),
        stage=Stage(values["stage"]),
        coach_id=values["coach_id"],
        player_id=values["player_id"],
        parent_id=values["parent_id"],
        conversation_id=values["conversation_id"],
        coach_confirmed=bool(values["coach_confirmed"]),
        player_confirmed=bool(values["player_confirmed"]),
        parent_confirmed=bool(values["parent_confirmed"]),
        declined_by=Party(declined_by) if declined_by else None,
        declined_via_confirmation=bool(values["declined_via_confirmation"]),
        created_at=values["created_at"],
        last_activity_at=values["last_activity_at"],
        confirmed_at=values["confirmed_at"],
        completed_at=values["completed_at"],
        advert_id=values["advert_id"],
        player_name=values["player_name"],
        team_name=values["team_name"],
        position=values["position"],
        age_group=values["age_group"],
        league=values["league"],
    )


def _match_params(match: Match) -> tuple:
    return (
        match.id,
        match.kind.value,
        match.stage.value,
        match.coach_id,
        match.player_id,
        match.parent_id,
        match.conversation_id,
        int(match.coach_confirmed),
        int(match.player_confirmed),
        int(match.parent_confirmed),
        match.declined_by.value if match.declined_by else None,
        int(match.declined_via_confirmation),
        match.created_at,
        match.last_activity_at,
        match.confirmed_at,
        match.completed_at,
        match.advert_id,
        match.player_name,
        match.team_name,
        match.position,
        match.age_group,
        match.league,
    )


class MatchRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def insert_match(self, match: Match) -> None:
        placeholders = ", ".join("?" * len(_MATCH_COLUMNS))
        self._conn.execute(
            f"INSERT INTO match_record ({', '.join(_MATCH_COLUMNS)}) VALUES ({placeholders})",
            _match_params(match),
        )

    def update_match(self, match: Match) -> None:
        self._conn.execute(
            """
            UPDATE match_record SET
                stage=?,
                coach_confirmed=?,
                player_confirmed=?,
                parent_confirmed=?,
                declined_by=?,
                declined_via_confirmation=?,
                last_activity_at=?,
                confirmed_at=?,
                completed_at=?
            WHERE match_id=?
            """,
            (
                match.stage.value,
                int(match.coach_confirmed),
                int(match.player_confirmed),
                int(match.parent_confirmed),
                match.declined_by.value if match.declined_by else None,
                int(match.declined_via_confirmation),
                match.last_activity_at,
                match.confirmed_at,
                match.completed_at,
                match.id,
            ),
        )

    def get_match(self, match_id: str) -> Optional[Match]:
        row = self._conn.execute(f"{_SELECT_MATCH} WHERE match_id=?", (match_id,)).fetchone()
        if row is None:
            return None
        return _row_to_match(row)

    def get_by_conversation(self, conversation_id: str) -> Optional[Match]:
        row = self._conn.execute(
            f"{_SELECT_MATCH} WHERE conversation_id=? ORDER BY created_at DESC LIMIT 1",
            (conversation_id,),
        ).fetchone()
        if row is None:
            return None
        return _row_to_match(row)

    def find_existing(
        self,
        advert_id: str,
        coach_id: str,
        counterparty_column: str,
        counterparty_id: str,
    ) -> Optional[Match]:
        if counterparty_column not in ("player_id", "parent_id"):
            raise ValueError(f"Unsupported counterparty column: {counterparty_column}")
        row = self._conn.execute(
            f"""
            {_SELECT_MATCH}
            WHERE advert_id=? AND coach_id=? AND {counterparty_column}=?
            ORDER BY created_at
            LIMIT 1
            """,
            (advert_id, coach_id, counterparty_id),
        ).fetchone()
        if row is None:
            return None
        return _row_to_match(row)

    def list_for_party(self, user_id: str, party: Party) -> list[Match]:
        column = {
            Party.COACH: "coach_id",
            Party.PLAYER: "player_id",
            Party.PARENT: "parent_id",
        }[party]
        rows = self._conn.execute(
            f"{_SELECT_MATCH} WHERE {column}=? ORDER BY last_activity_at DESC, match_id",
            (user_id,),
        ).fetchall()
        return [_row_to_match(row) for row in rows]

    def list_all(self) -> list[Match]:
        rows = self._conn.execute(f"{_SELECT_MATCH} ORDER BY created_at, match_id").fetchall()
        return [_row_to_match(row) for row in rows]

    def list_mirror_mismatches(self, limit: int | None = None) -> list[tuple[str, str, Stage]]:
        sql = """
            SELECT m.match_id, m.conversation_id, m.stage
            FROM match_record m
            JOIN conversation c ON c.conversation_id = m.conversation_id
            WHERE c.match_progress_stage != m.stage
            ORDER BY m.last_activity_at
        """
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        rows = self._conn.execute(sql, params).fetchall()
        return [(row[0], row[1], Stage(row[2])) for row in rows]

    def insert_transition(self, change: StageChange | None) -> None:
        if change is None:
            return
        self._conn.execute(
            """
            INSERT INTO match_transition (match_id, from_stage, to_stage, party, cause, at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                change.match_id,
                change.from_stage.value,
                change.to_stage.value,
                change.party.value,
                change.cause.value,
                change.at,
            ),
        )

    def list_transitions(self, match_id: str) -> list[StageChange]:
        rows = self._conn.execute(
            """
            SELECT match_id, from_stage, to_stage, party, cause, at
            FROM match_transition
            WHERE match_id=?
            ORDER BY transition_id
            """,
            (match_id,),
        ).fetchall()
        return [
            StageChange(
                match_id=row[0],
                from_stage=Stage(row[1]),
                to_stage=Stage(row[2]),
                party=Party(row[3]),
                cause=TransitionCause(row[4]),
                at=row[5],
            )
            for row in rows
        ]
