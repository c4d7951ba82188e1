from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Tuple

from apprentice.core.engine.errors import InvalidArgument, NotFound


@dataclass(frozen=True)
class Attack:
    id: str
    name: str
    damage: int

    def __post_init__(self) -> None:
        if isinstance(self.damage, bool) or not isinstance(self.damage, int):
            raise InvalidArgument(
                "Attack damage must be an integer",
                code="NEGATIVE_DAMAGE",
                meta={"attack_id": self.id, "damage": self.damage},
            )
        if self.damage <= 0:
            raise InvalidArgument(
                "Attack damage must be positive",
                code="NEGATIVE_DAMAGE",
                meta={"attack_id": self.id, "damage": self.damage},
            )


class AttackCatalog:
    """
    Fixed, ordered set of attacks the player can pick from.
    Built once; there is no way to add or remove attacks afterwards.
    """

    def __init__(self, attacks: Iterable[Attack]) -> None:
        items = tuple(attacks)
        by_id: Dict[str, Attack] = {}
        for attack in items:
            if attack.id in by_id:
                raise InvalidArgument(
                    "Duplicate attack id in catalog", meta={"attack_id": attack.id}
                )
            by_id[attack.id] = attack
        self._attacks: Tuple[Attack, ...] = items
        self._by_id = by_id

    def list_attacks(self) -> Tuple[Attack, ...]:
        return self._attacks

    def get_attack(self, attack_id: str) -> Attack:
        try:
            return self._by_id[attack_id]
        except KeyError:
            raise NotFound(
                "Unknown attack_id", code="UNKNOWN_ATTACK", meta={"attack_id": attack_id}
            ) from None

    def __contains__(self, attack_id: object) -> bool:
        return attack_id in self._by_id

    def __iter__(self) -> Iterator[Attack]:
        return iter(self._attacks)

    def __len__(self) -> int:
        return len(self._attacks)


# the four spells on the battle screen, left to right
DEFAULT_ATTACKS: Tuple[Attack, ...] = (
    Attack(id="fireball", name="Fireball", damage=8),
    Attack(id="wind_cutter", name="Wind Cutter", damage=6),
    Attack(id="water_blast", name="Water Blast", damage=8),
    Attack(id="rock_throw", name="Rock Throw", damage=10),
)


def default_catalog() -> AttackCatalog:
    return AttackCatalog(DEFAULT_ATTACKS)
