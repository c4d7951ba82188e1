from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from apprentice.core.engine.errors import ConcurrentCommand
from apprentice.core.engine.session import CombatSession
from apprentice.core.engine.state import CombatState
from apprentice.core.persistence.state_codec import (
    combat_state_from_dict,
    combat_state_to_dict,
    restore_session,
)
from apprentice.db.models import Battle, BattleSnapshot

logger = logging.getLogger(__name__)


def create_battle(db: Session, *, label: str) -> Battle:
    battle = Battle(label=label)
    db.add(battle)
    db.flush()
    return battle


def save_snapshot(
    db: Session,
    *,
    battle_id: str,
    label: Optional[str],
    state: CombatState,
    events_delta: List[Dict[str, Any]],
    parent_id: Optional[int] = None,
) -> BattleSnapshot:
    """
    Append a snapshot. With parent_id set, the snapshot the state was loaded
    from must still be the latest one, otherwise ConcurrentCommand is raised.
    """
    battle = (
        db.query(Battle).filter(Battle.id == battle_id).with_for_update().one_or_none()
    )
    if parent_id is not None:
        latest = _latest_row(db, battle_id)
        if latest is None or latest.id != parent_id:
            db.rollback()
            raise ConcurrentCommand(
                "Battle moved on while the command was running",
                meta={
                    "expected_snapshot_id": parent_id,
                    "latest_snapshot_id": latest.id if latest is not None else None,
                },
            )

    row = BattleSnapshot(
        battle_id=battle_id,
        label=label,
        state_json=combat_state_to_dict(state),
        events_json=list(events_delta),
    )
    db.add(row)

    if battle is not None and battle.outcome != state.outcome:
        battle.outcome = state.outcome

    db.commit()
    db.refresh(row)
    logger.debug(
        "Saved snapshot %s for battle %s (phase %s, %d events)",
        row.id,
        battle_id,
        state.phase,
        len(events_delta),
    )
    return row


def _latest_row(db: Session, battle_id: str) -> Optional[BattleSnapshot]:
    return (
        db.query(BattleSnapshot)
        .filter(BattleSnapshot.battle_id == battle_id)
        .order_by(BattleSnapshot.id.desc())
        .first()
    )


def load_latest_snapshot(
    db: Session, battle_id: str
) -> Tuple[Optional[int], Optional[CombatState], List[Dict[str, Any]]]:
    row = _latest_row(db, battle_id)
    if row is None:
        return None, None, []
    return row.id, combat_state_from_dict(row.state_json), list(row.events_json or [])


def load_session(db: Session, battle_id: str) -> Tuple[Optional[int], Optional[CombatSession]]:
    """Rehydrate the live session from the latest snapshot of a battle."""
    row = _latest_row(db, battle_id)
    if row is None:
        return None, None
    return row.id, restore_session(row.state_json, session_id=battle_id)


def list_snapshots(db: Session, battle_id: str) -> List[BattleSnapshot]:
    return (
        db.query(BattleSnapshot)
        .filter(BattleSnapshot.battle_id == battle_id)
        .order_by(BattleSnapshot.id.desc())
        .all()
    )
