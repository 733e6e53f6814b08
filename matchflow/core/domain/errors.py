"""Error taxonomy for match lifecycle operations.

Every error carries a machine-readable ``reason`` and the status code the
request boundary reports for it. Store unavailability is not modelled here;
``sqlite3.Error`` propagates unchanged.
"""

from __future__ import annotations


class MatchError(Exception):
    reason = "MATCH_ERROR"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidTransition(MatchError):
    reason = "INVALID_TRANSITION"
    status_code = 400

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move match from {current} to {target}")
        self.current = current
        self.target = target


class TerminalStage(MatchError):
    reason = "TERMINAL_STAGE"
    status_code = 400

    def __init__(self, match_id: str, stage: str) -> None:
        super().__init__(f"Match {match_id} is already {stage}; no further changes accepted")
        self.match_id = match_id
        self.stage = stage


class Unauthorized(MatchError):
    reason = "UNAUTHORIZED"
    status_code = 403


class NotFound(MatchError):
    reason = "NOT_FOUND"
    status_code = 404

    def __init__(self, match_id: str) -> None:
        super().__init__(f"Match {match_id} no longer exists")
        self.match_id = match_id


class ConversationNotFound(NotFound):
    def __init__(self, conversation_id: str) -> None:
        MatchError.__init__(self, f"No match is bound to conversation {conversation_id}")
        self.match_id = None
        self.conversation_id = conversation_id
