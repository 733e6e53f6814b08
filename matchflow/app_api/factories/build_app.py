"""Construct a fully wired match store for running the engine.

Responsibilities:
  - Prepare the database schema and assemble the store with its collaborators.
Must not:
  - Implement lifecycle logic; composition only.
"""

from __future__ import annotations

from typing import Optional

from matchflow.app_api.binding import ConversationBinding, SqliteConversationMirror
from matchflow.app_api.ports import MessageStore, NotificationDispatcher
from matchflow.app_api.store import MatchRecordStore
from matchflow.config import Settings
from matchflow.infra.sqlite.db import get_connection
from matchflow.infra.sqlite.migrator import apply_migrations


def build_match_store(
    settings: Settings,
    notifier: Optional[NotificationDispatcher] = None,
    message_store: Optional[MessageStore] = None,
) -> MatchRecordStore:
    """
    Composition root: migrate the database, wire the conversation binding and
    notification dispatcher, and return the store.
    """
    conn = get_connection(settings.db_path, timeout=settings.busy_timeout)
    try:
        apply_migrations(conn)
    finally:
        conn.close()

    binding = ConversationBinding(
        SqliteConversationMirror(settings.db_path, timeout=settings.busy_timeout),
        message_store=message_store,
    )
    return MatchRecordStore(
        settings.db_path,
        notifier=notifier,
        binding=binding,
        busy_timeout=settings.busy_timeout,
    )
