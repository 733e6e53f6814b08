"""Tests for the match/conversation binding."""

from __future__ import annotations

from typing import Any, Mapping

from matchflow.app_api.binding import ConversationBinding
from matchflow.core.domain.enums import MatchKind, Stage
from matchflow.core.domain.models import Match

T0 = "2026-01-10T09:00:00+00:00"


class _MemoryMirror:
    def __init__(self) -> None:
        self.stages: dict[str, Stage] = {}

    def set_match_progress_stage(self, conversation_id: str, stage: Stage) -> None:
        self.stages[conversation_id] = stage


class _MemoryMessages:
    def __init__(self) -> None:
        self.threads: dict[str, list[Mapping[str, Any]]] = {}

    def list_messages(self, conversation_id: str) -> list[Mapping[str, Any]]:
        return list(self.threads.get(conversation_id, []))

    def post_message(self, conversation_id: str, body: str) -> None:
        self.threads.setdefault(conversation_id, []).append({"body": body})


def _match(conversation_id: str | None) -> Match:
    return Match(
        id="m-1",
        kind=MatchKind.PLAYER_TO_TEAM,
        stage=Stage.TRIAL_INVITED,
        coach_id="coach-1",
        player_id="player-1",
        conversation_id=conversation_id,
        created_at=T0,
        last_activity_at=T0,
    )


def test_mirror_stage_writes_authoritative_stage() -> None:
    mirror = _MemoryMirror()
    binding = ConversationBinding(mirror)
    assert binding.mirror_stage(_match("conv-1")) is True
    assert mirror.stages == {"conv-1": Stage.TRIAL_INVITED}


def test_unbound_match_is_not_mirrored() -> None:
    mirror = _MemoryMirror()
    assert ConversationBinding(mirror).mirror_stage(_match(None)) is False
    assert mirror.stages == {}


def test_context_lists_thread_alongside_stage() -> None:
    messages = _MemoryMessages()
    messages.post_message("conv-1", "Trial on Saturday at 10?")
    binding = ConversationBinding(_MemoryMirror(), message_store=messages)

    context = binding.context(_match("conv-1"))

    assert context["matchProgressStage"] == "trial_invited"
    assert context["messages"] == [{"body": "Trial on Saturday at 10?"}]
