from .catalog import Attack, AttackCatalog, default_catalog
from .errors import (
    CombatError,
    ConcurrentCommand,
    InvalidArgument,
    InvalidState,
    InvalidTarget,
    NotFound,
    SessionClosed,
)
from .session import CombatSession, start_session
from .state import CombatEntity, CombatState, EnemyConfig, SessionConfig

__all__ = [
    "Attack",
    "AttackCatalog",
    "default_catalog",
    "CombatError",
    "ConcurrentCommand",
    "InvalidArgument",
    "InvalidState",
    "InvalidTarget",
    "NotFound",
    "SessionClosed",
    "CombatSession",
    "start_session",
    "CombatEntity",
    "CombatState",
    "EnemyConfig",
    "SessionConfig",
]
