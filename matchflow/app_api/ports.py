"""Port definitions for collaborators outside the match engine.

Responsibilities:
  - Define interface contracts for notification, conversation mirror and message access.
Must not:
  - Implement logic; interfaces only.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from matchflow.core.domain.enums import Stage


class NotificationDispatcher(Protocol):
    def dispatch(self, match_id: str, event: Mapping[str, Any]) -> None:
        ...


class ConversationMirror(Protocol):
    def set_match_progress_stage(self, conversation_id: str, stage: Stage) -> None:
        ...


class MessageStore(Protocol):
    def list_messages(self, conversation_id: str) -> list[Mapping[str, Any]]:
        ...

    def post_message(self, conversation_id: str, body: str) -> None:
        ...
