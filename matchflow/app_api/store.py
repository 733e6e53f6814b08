"""Match record store: serialized per-match mutations with post-commit side effects.

Responsibilities:
  - Load, validate and persist stage transitions and confirmations atomically per match.
  - Append transition history in the same transaction as the match update.
  - After commit, mirror the stage onto the bound conversation and fire notifications.

Inputs/Outputs:
  - Inputs: match ids, target stages, ActingParty, confirmation flags.
  - Outputs: updated Match values or ConfirmationResult; domain errors propagate unchanged.

Invariants:
  - Mutations on one match are serialized by an in-process lock and a BEGIN IMMEDIATE
    transaction; different matches use different locks. A lock entry lives only while
    some call holds or waits on it.
  - Notifications for one match are dispatched in commit order, under that match's lock.
  - Mirror and notification failures never roll back a committed change.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from matchflow.core.domain.enums import MatchKind, Party, Stage
from matchflow.core.domain.errors import ConversationNotFound, NotFound
from matchflow.core.domain.models import (
    ActingParty,
    ConfirmationResult,
    Match,
    StageChange,
    TransitionOutcome,
    utc_now_iso,
)
from matchflow.core.engine.consensus import COUNTERPARTY, confirm
from matchflow.core.engine.transitions import apply_transition
from matchflow.infra.sqlite.db import get_connection
from matchflow.infra.sqlite.repos.conversation_repo import ConversationRepo
from matchflow.infra.sqlite.repos.match_repo import MatchRepo
from .binding import ConversationBinding, SqliteConversationMirror
from .notifications import LoggingNotificationDispatcher, build_event
from .ports import NotificationDispatcher

logger = logging.getLogger(__name__)

_R = TypeVar("_R", TransitionOutcome, ConfirmationResult)


class _LockEntry:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class MatchRecordStore:
    def __init__(
        self,
        db_path: str,
        notifier: Optional[NotificationDispatcher] = None,
        binding: Optional[ConversationBinding] = None,
        busy_timeout: float = 5.0,
    ) -> None:
        self._db_path = db_path
        self._busy_timeout = busy_timeout
        self._notifier = notifier or LoggingNotificationDispatcher()
        self._binding = binding or ConversationBinding(
            SqliteConversationMirror(db_path, timeout=busy_timeout)
        )
        self._locks: dict[str, _LockEntry] = {}
        self._locks_guard = threading.Lock()

    @property
    def binding(self) -> ConversationBinding:
        return self._binding

    def _connect(self) -> sqlite3.Connection:
        return get_connection(self._db_path, timeout=self._busy_timeout)

    @contextmanager
    def _hold_lock(self, key: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _LockEntry()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._locks[key]

    def create_match(
        self,
        kind: MatchKind,
        coach_id: str,
        counterparty_id: str,
        conversation_id: Optional[str] = None,
        advert_id: Optional[str] = None,
        player_name: Optional[str] = None,
        team_name: Optional[str] = None,
        position: Optional[str] = None,
        age_group: Optional[str] = None,
        league: Optional[str] = None,
        match_id: Optional[str] = None,
    ) -> Match:
        """Create a match at INITIAL_INTEREST, or return the existing one for the same advert."""
        counterparty = COUNTERPARTY[kind]
        counterparty_column = "player_id" if counterparty == Party.PLAYER else "parent_id"
        now = utc_now_iso()
        match = Match(
            id=match_id or str(uuid.uuid4()),
            kind=kind,
            stage=Stage.INITIAL_INTEREST,
            coach_id=coach_id,
            conversation_id=conversation_id,
            created_at=now,
            last_activity_at=now,
            player_id=counterparty_id if counterparty == Party.PLAYER else None,
            parent_id=counterparty_id if counterparty == Party.PARENT else None,
            advert_id=advert_id,
            player_name=player_name,
            team_name=team_name,
            position=position,
            age_group=age_group,
            league=league,
        )

        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                repo = MatchRepo(conn)
                if advert_id is not None:
                    existing = repo.find_existing(
                        advert_id, coach_id, counterparty_column, counterparty_id
                    )
                    if existing is not None:
                        conn.execute("ROLLBACK")
                        logger.debug("match already exists match_id=%s advert_id=%s", existing.id, advert_id)
                        return existing
                if conversation_id is not None:
                    ConversationRepo(conn).ensure_conversation(
                        conversation_id, coach_id, counterparty_id
                    )
                repo.insert_match(match)
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()

        logger.info(
            "match created match_id=%s kind=%s coach_id=%s counterparty_id=%s",
            match.id,
            kind.value,
            coach_id,
            counterparty_id,
        )
        self._binding.mirror_stage(match)
        return match

    def get(self, match_id: str) -> Match:
        conn = self._connect()
        try:
            match = MatchRepo(conn).get_match(match_id)
        finally:
            conn.close()
        if match is None:
            raise NotFound(match_id)
        return match

    def get_by_conversation(self, conversation_id: str) -> Match:
        conn = self._connect()
        try:
            match = MatchRepo(conn).get_by_conversation(conversation_id)
        finally:
            conn.close()
        if match is None:
            raise ConversationNotFound(conversation_id)
        return match

    def apply_stage_transition(self, match_id: str, target: Stage, acting: ActingParty) -> Match:
        outcome = self._mutate(
            match_id,
            lambda match: apply_transition(match, target, acting),
        )
        return outcome.match

    def apply_stage_transition_by_conversation(
        self, conversation_id: str, target: Stage, acting: ActingParty
    ) -> Match:
        match = self.get_by_conversation(conversation_id)
        return self.apply_stage_transition(match.id, target, acting)

    def apply_confirmation(self, match_id: str, acting: ActingParty, confirmed: bool) -> ConfirmationResult:
        return self._mutate(
            match_id,
            lambda match: confirm(match, acting, confirmed),
        )

    def list_for_party(self, user_id: str, role: Party) -> list[Match]:
        conn = self._connect()
        try:
            return MatchRepo(conn).list_for_party(user_id, role)
        finally:
            conn.close()

    def list_all(self) -> list[Match]:
        conn = self._connect()
        try:
            return MatchRepo(conn).list_all()
        finally:
            conn.close()

    def history(self, match_id: str) -> list[StageChange]:
        conn = self._connect()
        try:
            repo = MatchRepo(conn)
            if repo.get_match(match_id) is None:
                raise NotFound(match_id)
            return repo.list_transitions(match_id)
        finally:
            conn.close()

    def _mutate(self, match_id: str, step: Callable[[Match], _R]) -> _R:
        with self._hold_lock(match_id):
            conn = self._connect()
            try:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    repo = MatchRepo(conn)
                    current = repo.get_match(match_id)
                    if current is None:
                        raise NotFound(match_id)
                    result = step(current)
                    if result.changed:
                        repo.update_match(result.match)
                        repo.insert_transition(result.change)
                    conn.execute("COMMIT")
                except Exception:
                    conn.execute("ROLLBACK")
                    raise
            finally:
                conn.close()

            if not result.changed:
                return result

            if result.change is not None:
                logger.info(
                    "match stage committed match_id=%s from=%s to=%s party=%s cause=%s",
                    match_id,
                    result.change.from_stage.value,
                    result.change.to_stage.value,
                    result.change.party.value,
                    result.change.cause.value,
                )
                self._binding.mirror_stage(result.match)

            self._notify(match_id, current.stage, result.match.stage)
        return result

    def _notify(self, match_id: str, previous_stage: Stage, new_stage: Stage) -> None:
        event = build_event(match_id, previous_stage, new_stage)
        try:
            self._notifier.dispatch(match_id, event)
        except Exception:
            logger.exception("notification dispatch failed match_id=%s event=%s", match_id, event["event"])
