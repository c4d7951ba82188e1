from __future__ import annotations

from dataclasses import asdict, is_dataclass
from random import Random
from typing import Any, Optional, cast

from apprentice.core.engine.session import CombatSession
from apprentice.core.engine.state import CombatEntity, CombatState

SCHEMA_VERSION = 1


# ---------- helpers ----------


def _jsonable(v: Any) -> Any:
    """set/tuple -> list, dataclass/pydantic -> dict, recursively."""
    if v is None:
        return None
    if isinstance(v, (str, int, float, bool)):
        return v
    if isinstance(v, (set, tuple, list)):
        return [_jsonable(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _jsonable(val) for k, val in v.items()}

    md = getattr(v, "model_dump", None)
    if callable(md):
        return _jsonable(md())

    if is_dataclass(v) and not isinstance(v, type):
        return _jsonable(asdict(cast(Any, v)))

    return str(v)


def _rng_state_to_json(rng: Random) -> list[Any]:
    version, internal, gauss_next = rng.getstate()
    return [version, list(internal), gauss_next]


def _rng_from_json(raw: Any, seed: int) -> Random:
    rng = Random(seed)
    if isinstance(raw, (list, tuple)) and len(raw) == 3:
        version, internal, gauss_next = raw
        # Random.setstate wants the exact tuple shape getstate produced
        rng.setstate((int(version), tuple(int(x) for x in internal), gauss_next))
    return rng


# ---------- entity codec ----------


def entity_to_dict(e: CombatEntity) -> dict[str, Any]:
    out = cast(dict[str, Any], _jsonable(e))
    out["is_alive"] = e.is_alive
    return out


def entity_from_dict(d: dict[str, Any]) -> CombatEntity:
    max_health = int(d["max_health"])
    health = int(d.get("health", max_health))
    return CombatEntity(
        id=str(d["id"]),
        name=str(d.get("name") or d["id"]),
        max_health=max_health,
        health=min(max(0, health), max_health),
        kind=d.get("kind", "enemy"),
    )


# ---------- state codec ----------


def combat_state_to_dict(state: CombatState) -> dict[str, Any]:
    """
    Snapshot of the battle that can be restored to continue it.
    The RNG state is stored too, so enemy rolls continue the same stream.
    """
    return {
        "schema_version": SCHEMA_VERSION,
        "phase": state.phase,
        "round": state.round,
        "seq": state.seq,
        "t": state.t,
        "outcome": state.outcome,
        "selected_attack_id": state.selected_attack_id,
        "defeated_ids": list(state.defeated_ids),
        "stop_on_defeat": state.stop_on_defeat,
        "targetable_ids": state.targetable_ids(),
        "player": entity_to_dict(state.player),
        "enemies": [entity_to_dict(e) for e in state.enemies],
        "rng_seed": state.rng_seed,
        "rng_state": _rng_state_to_json(state.rng),
    }


def combat_state_from_dict(d: dict[str, Any]) -> CombatState:
    player = entity_from_dict(d["player"])
    enemies = [entity_from_dict(e) for e in d.get("enemies") or []]
    seed = int(d.get("rng_seed", 0) or 0)

    state = CombatState(
        player=player,
        enemies=enemies,
        phase=d.get("phase", "player_selecting"),
        round=int(d.get("round", 1)),
        seq=int(d.get("seq", 0)),
        t=int(d.get("t", 0)),
        selected_attack_id=d.get("selected_attack_id"),
        defeated_ids=[str(x) for x in d.get("defeated_ids") or []],
        outcome=d.get("outcome", "in_progress"),
        stop_on_defeat=bool(d.get("stop_on_defeat", True)),
        rng_seed=seed,
    )
    state.rng = _rng_from_json(d.get("rng_state"), seed)
    return state


def restore_session(
    d: dict[str, Any],
    *,
    session_id: Optional[str] = None,
    history: Optional[list[dict]] = None,
) -> CombatSession:
    return CombatSession(
        combat_state_from_dict(d), session_id=session_id, history=history
    )
