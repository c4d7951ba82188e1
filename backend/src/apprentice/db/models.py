from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import JSON

from .base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Battle(Base):
    __tablename__ = "battles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    label: Mapped[str] = mapped_column(String(200), nullable=False, default="battle")

    # in_progress | victory | defeat, mirrored from the latest snapshot
    outcome: Mapped[str] = mapped_column(
        String(20), nullable=False, default="in_progress", index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    snapshots: Mapped[List["BattleSnapshot"]] = relationship(
        back_populates="battle", cascade="all, delete-orphan"
    )


class BattleSnapshot(Base):
    __tablename__ = "battle_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    battle_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("battles.id"), nullable=False, index=True
    )
    label: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    state_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    # events produced by the command that led to this snapshot
    events_json: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    battle: Mapped[Battle] = relationship(back_populates="snapshots")


class SaveSlot(Base):
    __tablename__ = "save_slots"
    __table_args__ = (
        UniqueConstraint("user_id", "slot_number", name="uq_save_slot_user_slot"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    slot_number: Mapped[int] = mapped_column(Integer, nullable=False)

    player_stats: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    progress: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
