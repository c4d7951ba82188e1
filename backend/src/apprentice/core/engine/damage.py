from __future__ import annotations

from apprentice.core.engine.errors import InvalidArgument
from apprentice.core.engine.state import CombatEntity


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidArgument(
            "Damage amount must be an integer",
            code="NEGATIVE_DAMAGE",
            meta={"amount": amount},
        )
    if amount < 0:
        raise InvalidArgument(
            "Damage amount must be >= 0", code="NEGATIVE_DAMAGE", meta={"amount": amount}
        )


def health_after(health: int, amount: int) -> int:
    _check_amount(amount)
    return max(0, health - amount)


def apply_damage(entity: CombatEntity, amount: int) -> CombatEntity:
    """
    Subtract amount from entity.health, clamping at 0. Mutates and returns entity.
    Removing a dead enemy from targeting is the session's job, not this one.
    """
    entity.health = health_after(entity.health, amount)
    return entity
