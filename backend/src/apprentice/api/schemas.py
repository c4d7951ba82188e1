from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from apprentice.core.engine.state import EnemyConfig, SessionConfig


# ---- attacks ----


class AttackOut(BaseModel):
    id: str
    name: str
    damage: int


# ---- battles ----


class EnemySpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_health: int = Field(default=15, gt=0)
    name: Optional[str] = None


def _reference_enemies() -> List[EnemySpec]:
    return [EnemySpec() for _ in range(3)]


class BattleCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: str = "battle"
    player_max_health: int = Field(default=50, gt=0)
    enemies: List[EnemySpec] = Field(default_factory=_reference_enemies, min_length=1)
    seed: Optional[int] = None
    stop_on_defeat: bool = True

    def to_config(self) -> SessionConfig:
        return SessionConfig(
            player_max_health=self.player_max_health,
            enemies=[EnemyConfig(max_health=e.max_health, name=e.name) for e in self.enemies],
            seed=self.seed,
            stop_on_defeat=self.stop_on_defeat,
        )


class BattleOut(BaseModel):
    id: str
    label: str
    outcome: str
    created_at: datetime
    updated_at: datetime


class BattleRuntimeResponse(BaseModel):
    battle_id: str
    snapshot_id: int
    state: Dict[str, Any]
    events_delta: List[Dict[str, Any]] = Field(default_factory=list)


class ApplyCommandRequest(BaseModel):
    command: Dict[str, Any]
    label: str = "cmd"
    # run the enemy turn in the same request when the player action hands over to it
    auto_resolve_enemy_turn: bool = False
    # snapshot the caller last saw; a newer one means another command got there first
    expected_snapshot_id: Optional[int] = None


class GetBattleStateResponse(BaseModel):
    battle_id: str
    snapshot_id: int
    state: Dict[str, Any]


class SnapshotOut(BaseModel):
    id: int
    battle_id: str
    label: Optional[str] = None
    phase: str
    round: int
    event_count: int
    created_at: datetime


# ---- save slots ----


class SaveGameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # the browser client sends camelCase
    slot_number: int = Field(alias="slotNumber")
    player_stats: Dict[str, Any] = Field(default_factory=dict, alias="playerStats")
    progress: Dict[str, Any] = Field(default_factory=dict)


class LoadGameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slot_number: int = Field(alias="slotNumber")


class SaveSlotOut(BaseModel):
    # responses go back in the same camelCase shape the client sends
    model_config = ConfigDict(populate_by_name=True)

    id: int
    user_id: str = Field(alias="userId")
    slot_number: int = Field(alias="slotNumber")
    player_stats: Dict[str, Any] = Field(alias="playerStats")
    progress: Dict[str, Any]
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class SaveGameResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    save_slot: SaveSlotOut = Field(alias="saveSlot")
