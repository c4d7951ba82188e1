from __future__ import annotations

from dataclasses import dataclass, field
from random import Random
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Phase = Literal[
    "player_selecting",
    "awaiting_target",
    "resolving_player_action",
    "enemy_turn",
    "resolving_enemy_action",
    "victory",
    "defeat",
]

Outcome = Literal["in_progress", "victory", "defeat"]

EntityKind = Literal["player", "enemy"]

TERMINAL_PHASES: frozenset[str] = frozenset({"victory", "defeat"})

PLAYER_ID = "player"


class EnemyConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    max_health: int = Field(gt=0)
    name: Optional[str] = None


class SessionConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    player_max_health: int = Field(gt=0)
    enemies: List[EnemyConfig] = Field(min_length=1)

    seed: Optional[int] = None

    # False keeps every queued enemy hit in a turn even after the player drops to 0
    stop_on_defeat: bool = True

    @classmethod
    def reference(cls, *, seed: Optional[int] = None) -> "SessionConfig":
        """Player 50, three skeletons at 15."""
        return cls(
            player_max_health=50,
            enemies=[EnemyConfig(max_health=15) for _ in range(3)],
            seed=seed,
        )


@dataclass
class CombatEntity:
    id: str
    name: str
    max_health: int
    health: int
    kind: EntityKind = "enemy"

    @property
    def is_alive(self) -> bool:
        return self.health > 0


@dataclass
class CombatState:
    player: CombatEntity
    enemies: List[CombatEntity] = field(default_factory=list)

    phase: Phase = "player_selecting"
    round: int = 1

    seq: int = 0
    t: int = 0

    # pending selection, only set while phase == "awaiting_target"
    selected_attack_id: Optional[str] = None

    # no longer targetable, still shown
    defeated_ids: List[str] = field(default_factory=list)

    outcome: Outcome = "in_progress"
    stop_on_defeat: bool = True

    rng_seed: int = 0
    rng: Random = field(default_factory=Random)

    def with_seed(self, seed: int) -> "CombatState":
        self.rng_seed = seed
        self.rng = Random(seed)
        return self

    @property
    def is_closed(self) -> bool:
        return self.phase in TERMINAL_PHASES

    def enemy(self, enemy_id: str) -> Optional[CombatEntity]:
        for e in self.enemies:
            if e.id == enemy_id:
                return e
        return None

    def entity(self, entity_id: str) -> Optional[CombatEntity]:
        if entity_id == self.player.id:
            return self.player
        return self.enemy(entity_id)

    def living_enemies(self) -> List[CombatEntity]:
        return [e for e in self.enemies if e.is_alive]

    def targetable_ids(self) -> List[str]:
        return [
            e.id for e in self.enemies if e.is_alive and e.id not in self.defeated_ids
        ]


def enemy_id_for(index: int) -> str:
    return f"enemy{index}"


def build_state(config: SessionConfig, *, rng: Optional[Random] = None) -> CombatState:
    player = CombatEntity(
        id=PLAYER_ID,
        name="Apprentice",
        max_health=config.player_max_health,
        health=config.player_max_health,
        kind="player",
    )
    enemies = [
        CombatEntity(
            id=enemy_id_for(i),
            name=ec.name or f"Skeleton {i + 1}",
            max_health=ec.max_health,
            health=ec.max_health,
            kind="enemy",
        )
        for i, ec in enumerate(config.enemies)
    ]
    state = CombatState(
        player=player, enemies=enemies, stop_on_defeat=config.stop_on_defeat
    )

    if rng is not None:
        state.rng = rng
        state.rng_seed = config.seed if config.seed is not None else 0
    elif config.seed is not None:
        state.with_seed(config.seed)
    else:
        state.with_seed(Random().randrange(2**31))

    return state
