from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from apprentice.core.engine.catalog import AttackCatalog
from apprentice.core.engine.commands import (
    Command,
    ResolveEnemyTurn,
    SelectAttack,
    TargetEnemy,
)
from apprentice.core.engine.errors import CombatError, error_for_code
from apprentice.core.engine.state import CombatState


@dataclass
class ValidationError:
    code: str
    message: str
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_exception(self) -> CombatError:
        return error_for_code(self.code, self.message, self.meta)


@dataclass
class ValidationResult:
    ok: bool
    errors: List[ValidationError] = field(default_factory=list)


def _err(code: str, message: str, **meta: Any) -> ValidationResult:
    return ValidationResult(
        ok=False, errors=[ValidationError(code=code, message=message, meta=meta)]
    )


def validate_command(
    state: CombatState,
    cmd: Command,
    *,
    catalog: AttackCatalog,
    in_flight: bool = False,
) -> ValidationResult:
    # order matters: a closed session reports SESSION_CLOSED whatever the command
    if state.is_closed:
        return _err(
            "SESSION_CLOSED",
            "Battle is over; start a new session",
            outcome=state.outcome,
        )

    if in_flight:
        return _err(
            "COMMAND_IN_FLIGHT",
            "Another command is in flight; commit it first",
            phase=state.phase,
        )

    if isinstance(cmd, SelectAttack):
        if state.phase not in ("player_selecting", "awaiting_target"):
            return _err(
                "BAD_PHASE",
                "SelectAttack requires player_selecting or awaiting_target phase",
                phase=state.phase,
            )
        if cmd.attack_id not in catalog:
            return _err(
                "UNKNOWN_ATTACK", "Unknown attack_id", attack_id=cmd.attack_id
            )
        return ValidationResult(ok=True)

    if isinstance(cmd, TargetEnemy):
        if state.phase != "awaiting_target":
            return _err(
                "BAD_PHASE",
                "TargetEnemy requires awaiting_target phase",
                phase=state.phase,
            )
        if state.selected_attack_id is None:
            return _err("NO_ATTACK_SELECTED", "Select an attack first")
        target = state.enemy(cmd.enemy_id)
        if target is None:
            return _err("UNKNOWN_ENEMY", "Unknown enemy_id", enemy_id=cmd.enemy_id)
        if not target.is_alive or cmd.enemy_id in state.defeated_ids:
            return _err(
                "TARGET_DEFEATED",
                "Enemy already defeated",
                enemy_id=cmd.enemy_id,
            )
        return ValidationResult(ok=True)

    if isinstance(cmd, ResolveEnemyTurn):
        if state.phase != "enemy_turn":
            return _err(
                "BAD_PHASE",
                "ResolveEnemyTurn requires enemy_turn phase",
                phase=state.phase,
            )
        return ValidationResult(ok=True)

    return _err("UNKNOWN_COMMAND", "Unhandled command", type=getattr(cmd, "type", None))
