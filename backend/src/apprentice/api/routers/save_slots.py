from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from apprentice.api.deps import MessageError, check_slot_number, get_current_user_id
from apprentice.api.schemas import (
    LoadGameRequest,
    SaveGameRequest,
    SaveGameResponse,
    SaveSlotOut,
)
from apprentice.db.deps import get_db
from apprentice.db.models import SaveSlot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["save_slots"])


def _slot_out(s: SaveSlot) -> SaveSlotOut:
    return SaveSlotOut(
        id=s.id,
        user_id=s.user_id,
        slot_number=s.slot_number,
        player_stats=s.player_stats or {},
        progress=s.progress or {},
        updated_at=s.updated_at,
    )


def _find_slot(db: Session, user_id: str, slot_number: int) -> SaveSlot | None:
    return (
        db.query(SaveSlot)
        .filter(SaveSlot.user_id == user_id, SaveSlot.slot_number == slot_number)
        .first()
    )


def _load(db: Session, user_id: str, slot_number: int) -> SaveSlotOut:
    check_slot_number(slot_number)
    obj = _find_slot(db, user_id, slot_number)
    if not obj:
        raise MessageError(404, "No save found for this slot.")
    return _slot_out(obj)


@router.post("/save-game", response_model=SaveGameResponse)
def save_game(
    payload: SaveGameRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    check_slot_number(payload.slot_number)

    # one row per (user, slot): overwrite in place
    obj = _find_slot(db, user_id, payload.slot_number)
    if obj is None:
        obj = SaveSlot(user_id=user_id, slot_number=payload.slot_number)
        db.add(obj)
    obj.player_stats = dict(payload.player_stats)
    obj.progress = dict(payload.progress)

    db.commit()
    db.refresh(obj)
    logger.info("Saved slot %s for user %s", payload.slot_number, user_id)

    return SaveGameResponse(message="Game saved successfully", save_slot=_slot_out(obj))


@router.post("/load-game", response_model=SaveSlotOut)
def load_game(
    payload: LoadGameRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return _load(db, user_id, payload.slot_number)


@router.get("/load-game/{slot_number}", response_model=SaveSlotOut)
def load_game_by_slot(
    slot_number: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return _load(db, user_id, slot_number)


@router.get("/save-slots", response_model=list[SaveSlotOut])
def list_save_slots(
    user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)
):
    items = (
        db.query(SaveSlot)
        .filter(SaveSlot.user_id == user_id)
        .order_by(SaveSlot.slot_number.asc())
        .all()
    )
    return [_slot_out(s) for s in items]
