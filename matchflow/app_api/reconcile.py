"""Repair conversation stage mirrors that drifted from the authoritative match.

Responsibilities:
  - Find conversations whose mirrored stage differs from their bound match.
  - Rewrite the mirror from the match record.
Invariants:
  - Idempotent; never writes to match_record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from matchflow.infra.sqlite.db import get_connection
from matchflow.infra.sqlite.repos.conversation_repo import ConversationRepo
from matchflow.infra.sqlite.repos.match_repo import MatchRepo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileReport:
    checked: int
    repaired: int
    dry_run: bool


def reconcile_conversation_mirrors(
    db_path: str,
    limit: int | None = None,
    dry_run: bool = False,
    timeout: float = 5.0,
) -> ReconcileReport:
    conn = get_connection(db_path, timeout=timeout)
    try:
        if dry_run:
            mismatches = MatchRepo(conn).list_mirror_mismatches(limit=limit)
            for match_id, conversation_id, stage in mismatches:
                logger.info(
                    "mirror drift match_id=%s conversation_id=%s stage=%s",
                    match_id,
                    conversation_id,
                    stage.value,
                )
            return ReconcileReport(checked=len(mismatches), repaired=0, dry_run=True)

        conversations = ConversationRepo(conn)
        # Read and repair under the same write lock.
        conn.execute("BEGIN IMMEDIATE")
        try:
            mismatches = MatchRepo(conn).list_mirror_mismatches(limit=limit)
            for match_id, conversation_id, stage in mismatches:
                conversations.set_match_progress_stage(conversation_id, stage)
                logger.info(
                    "mirror repaired match_id=%s conversation_id=%s stage=%s",
                    match_id,
                    conversation_id,
                    stage.value,
                )
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise
        return ReconcileReport(checked=len(mismatches), repaired=len(mismatches), dry_run=False)
    finally:
        conn.close()
