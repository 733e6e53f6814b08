"""SQLite repository for the conversation stage mirror."""

from __future__ import annotations

import sqlite3
from typing import Optional

from matchflow.core.domain.enums import Stage, parse_stage
from matchflow.core.domain.models import utc_now_iso


class ConversationRepo:
    """Owns the denormalized ``match_progress_stage`` column only.

    Message bodies live with the external message store; this table keeps
    the participants and the mirrored stage so threads can be listed with
    their progress badge.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def ensure_conversation(self, conversation_id: str, participant_a: str, participant_b: str) -> None:
        self._conn.execute(
            """
            INSERT INTO conversation (conversation_id, participant_a, participant_b, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(conversation_id) DO NOTHING
            """,
            (conversation_id, participant_a, participant_b, utc_now_iso()),
        )

    def set_match_progress_stage(self, conversation_id: str, stage: Stage) -> None:
        self._conn.execute(
            """
            UPDATE conversation SET match_progress_stage=?, updated_at=?
            WHERE conversation_id=?
            """,
            (stage.value, utc_now_iso(), conversation_id),
        )

    def get_match_progress_stage(self, conversation_id: str) -> Optional[Stage]:
        row = self._conn.execute(
            "SELECT match_progress_stage FROM conversation WHERE conversation_id=?",
            (conversation_id,),
        ).fetchone()
        if row is None:
            return None
        return parse_stage(row[0])
