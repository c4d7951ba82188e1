from __future__ import annotations

from typing import Any, Dict, Optional


class CombatError(Exception):
    """Base class for every rejected engine call. State is left unchanged."""

    default_code = "COMBAT_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.meta: Dict[str, Any] = dict(meta or {})

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "meta": self.meta}


class NotFound(CombatError):
    default_code = "NOT_FOUND"


class InvalidState(CombatError):
    default_code = "BAD_PHASE"


class InvalidTarget(CombatError):
    default_code = "INVALID_TARGET"


class InvalidArgument(CombatError):
    default_code = "INVALID_ARGUMENT"


class ConcurrentCommand(CombatError):
    default_code = "COMMAND_IN_FLIGHT"


class SessionClosed(CombatError):
    default_code = "SESSION_CLOSED"


# validator codes -> error class
ERROR_CLASSES: Dict[str, type[CombatError]] = {
    "UNKNOWN_ATTACK": NotFound,
    "UNKNOWN_ENEMY": NotFound,
    "BAD_PHASE": InvalidState,
    "NO_ATTACK_SELECTED": InvalidState,
    "NOTHING_IN_FLIGHT": InvalidState,
    "TARGET_DEFEATED": InvalidTarget,
    "NEGATIVE_DAMAGE": InvalidArgument,
    "UNKNOWN_COMMAND": InvalidArgument,
    "COMMAND_IN_FLIGHT": ConcurrentCommand,
    "SESSION_CLOSED": SessionClosed,
}


def error_for_code(code: str, message: str, meta: Optional[Dict[str, Any]] = None) -> CombatError:
    cls = ERROR_CLASSES.get(code, CombatError)
    return cls(message, code=code, meta=meta)
