from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from apprentice.api.schemas import BattleCreate, BattleOut, BattleRuntimeResponse
from apprentice.core.engine.session import start_session
from apprentice.core.persistence.runtime_store import create_battle, save_snapshot
from apprentice.core.persistence.state_codec import combat_state_to_dict
from apprentice.db.deps import get_db
from apprentice.db.models import Battle

router = APIRouter(prefix="/battles", tags=["battles"])


def _battle_out(b: Battle) -> BattleOut:
    return BattleOut(
        id=b.id,
        label=b.label,
        outcome=b.outcome,
        created_at=b.created_at,
        updated_at=b.updated_at,
    )


@router.post("", response_model=BattleRuntimeResponse)
def start_battle(payload: BattleCreate, db: Session = Depends(get_db)):
    battle = create_battle(db, label=payload.label)
    session = start_session(payload.to_config(), session_id=battle.id)

    events_delta = session.events
    row = save_snapshot(
        db,
        battle_id=battle.id,
        label="start",
        state=session.state,
        events_delta=events_delta,
    )

    return BattleRuntimeResponse(
        battle_id=battle.id,
        snapshot_id=row.id,
        state=combat_state_to_dict(session.state),
        events_delta=events_delta,
    )


@router.get("", response_model=list[BattleOut])
def list_battles(db: Session = Depends(get_db)):
    items = db.query(Battle).order_by(Battle.created_at.desc()).all()
    return [_battle_out(b) for b in items]


@router.get("/{battle_id}", response_model=BattleOut)
def get_battle(battle_id: str, db: Session = Depends(get_db)):
    obj = db.get(Battle, battle_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Battle not found")
    return _battle_out(obj)
