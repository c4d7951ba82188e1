from __future__ import annotations

from dataclasses import dataclass
from random import Random
from typing import Protocol

from apprentice.core.engine.errors import InvalidArgument
from apprentice.core.engine.state import CombatEntity


class EnemyActionPolicy(Protocol):
    def compute_damage(self, enemy: CombatEntity, rng: Random) -> int: ...


@dataclass(frozen=True)
class UniformDamagePolicy:
    """Every live enemy hits for randint(min_damage, max_damage), bounds inclusive."""

    min_damage: int = 5
    max_damage: int = 10

    def __post_init__(self) -> None:
        if self.min_damage < 0 or self.min_damage > self.max_damage:
            raise InvalidArgument(
                "Bad damage bounds",
                meta={"min_damage": self.min_damage, "max_damage": self.max_damage},
            )

    def compute_damage(self, enemy: CombatEntity, rng: Random) -> int:
        return rng.randint(self.min_damage, self.max_damage)


DEFAULT_POLICY = UniformDamagePolicy()
