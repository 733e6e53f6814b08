"""Binding between a match and its conversation thread.

Responsibilities:
  - Write the mirrored stage onto the bound conversation after a local commit.
  - Assemble the match together with its thread for display.
Must not:
  - Mutate messages; the message store is read-only from here.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from matchflow.core.domain.enums import Stage
from matchflow.core.domain.models import Match
from matchflow.infra.sqlite.db import get_connection
from matchflow.infra.sqlite.repos.conversation_repo import ConversationRepo
from .ports import ConversationMirror, MessageStore

logger = logging.getLogger(__name__)


class SqliteConversationMirror:
    def __init__(self, db_path: str, timeout: float = 5.0) -> None:
        self._db_path = db_path
        self._timeout = timeout

    def set_match_progress_stage(self, conversation_id: str, stage: Stage) -> None:
        conn = get_connection(self._db_path, timeout=self._timeout)
        try:
            ConversationRepo(conn).set_match_progress_stage(conversation_id, stage)
        finally:
            conn.close()

    def get_match_progress_stage(self, conversation_id: str) -> Optional[Stage]:
        conn = get_connection(self._db_path, timeout=self._timeout)
        try:
            return ConversationRepo(conn).get_match_progress_stage(conversation_id)
        finally:
            conn.close()


class ConversationBinding:
    def __init__(
        self,
        mirror: ConversationMirror,
        message_store: Optional[MessageStore] = None,
    ) -> None:
        self._mirror = mirror
        self._message_store = message_store

    def mirror_stage(self, match: Match) -> bool:
        """Best-effort copy of the authoritative stage; returns False on failure."""
        if not match.conversation_id:
            return False
        try:
            self._mirror.set_match_progress_stage(match.conversation_id, match.stage)
        except Exception:
            logger.exception(
                "mirror write failed match_id=%s conversation_id=%s stage=%s",
                match.id,
                match.conversation_id,
                match.stage.value,
            )
            return False
        return True

    def context(self, match: Match) -> dict[str, Any]:
        messages: list[Mapping[str, Any]] = []
        if self._message_store is not None and match.conversation_id:
            messages = self._message_store.list_messages(match.conversation_id)
        return {
            "conversationId": match.conversation_id,
            "matchProgressStage": match.stage.value,
            "messages": list(messages),
        }
