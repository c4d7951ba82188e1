from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from apprentice.api.deps import http_error_for
from apprentice.api.schemas import (
    ApplyCommandRequest,
    BattleRuntimeResponse,
    GetBattleStateResponse,
    SnapshotOut,
)
from apprentice.core.engine.commands import Command
from apprentice.core.engine.errors import CombatError, ConcurrentCommand
from apprentice.core.persistence.runtime_store import (
    list_snapshots,
    load_latest_snapshot,
    load_session,
    save_snapshot,
)
from apprentice.core.persistence.state_codec import combat_state_to_dict
from apprentice.db.deps import get_db
from apprentice.db.models import Battle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/battles", tags=["battle-runtime"])

_COMMAND_ADAPTER = TypeAdapter(Command)


def _require_battle(db: Session, battle_id: str) -> Battle:
    battle = db.get(Battle, battle_id)
    if not battle:
        raise HTTPException(status_code=404, detail="Battle not found")
    return battle


@router.post("/{battle_id}/commands:apply", response_model=BattleRuntimeResponse)
def apply_command(
    battle_id: str, req: ApplyCommandRequest, db: Session = Depends(get_db)
):
    _require_battle(db, battle_id)

    snapshot_id, session = load_session(db, battle_id)
    if snapshot_id is None or session is None:
        raise HTTPException(status_code=409, detail="Battle has no saved state")

    try:
        cmd_obj = _COMMAND_ADAPTER.validate_python(req.command)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Bad command: {e}")

    events_delta: List[Dict[str, Any]] = []
    try:
        if req.expected_snapshot_id is not None and req.expected_snapshot_id != snapshot_id:
            raise ConcurrentCommand(
                "Battle has a newer snapshot than the one the command was made for",
                meta={
                    "expected_snapshot_id": req.expected_snapshot_id,
                    "latest_snapshot_id": snapshot_id,
                },
            )
        events_delta.extend(session.execute(cmd_obj))
        if req.auto_resolve_enemy_turn and session.phase == "enemy_turn":
            events_delta.extend(session.resolve_enemy_turn())

        # only one successor per snapshot
        row = save_snapshot(
            db,
            battle_id=battle_id,
            label=req.label,
            state=session.state,
            events_delta=events_delta,
            parent_id=snapshot_id,
        )
    except CombatError as e:
        logger.info("Battle %s rejected %s: %s", battle_id, cmd_obj.type, e.code)
        # nothing from a rejected command is saved
        raise http_error_for(e)

    return BattleRuntimeResponse(
        battle_id=battle_id,
        snapshot_id=row.id,
        state=combat_state_to_dict(session.state),
        events_delta=events_delta,
    )


@router.get("/{battle_id}/state", response_model=GetBattleStateResponse)
def get_state(battle_id: str, db: Session = Depends(get_db)):
    _require_battle(db, battle_id)

    snapshot_id, state_obj, _events = load_latest_snapshot(db, battle_id)
    if snapshot_id is None or state_obj is None:
        raise HTTPException(status_code=404, detail="No saved state for battle")

    return GetBattleStateResponse(
        battle_id=battle_id,
        snapshot_id=snapshot_id,
        state=combat_state_to_dict(state_obj),
    )


@router.get("/{battle_id}/snapshots", response_model=list[SnapshotOut])
def get_snapshots(battle_id: str, db: Session = Depends(get_db)):
    _require_battle(db, battle_id)

    return [
        SnapshotOut(
            id=s.id,
            battle_id=s.battle_id,
            label=s.label,
            phase=str(s.state_json.get("phase", "")),
            round=int(s.state_json.get("round", 1)),
            event_count=len(s.events_json or []),
            created_at=s.created_at,
        )
        for s in list_snapshots(db, battle_id)
    ]
