import pytest

from apprentice.core.engine.catalog import (
    Attack,
    AttackCatalog,
    DEFAULT_ATTACKS,
    default_catalog,
)
from apprentice.core.engine.errors import InvalidArgument, NotFound


def test_default_catalog_has_the_four_battle_spells_in_order():
    catalog = default_catalog()
    assert [(a.id, a.damage) for a in catalog.list_attacks()] == [
        ("fireball", 8),
        ("wind_cutter", 6),
        ("water_blast", 8),
        ("rock_throw", 10),
    ]
    assert len(catalog) == 4


def test_list_attacks_is_restartable():
    catalog = default_catalog()
    assert list(catalog) == list(catalog) == list(catalog.list_attacks())


def test_get_attack_and_unknown_id():
    catalog = default_catalog()
    assert catalog.get_attack("rock_throw").name == "Rock Throw"
    assert "fireball" in catalog
    assert "meteor" not in catalog

    with pytest.raises(NotFound) as ei:
        catalog.get_attack("meteor")
    assert ei.value.code == "UNKNOWN_ATTACK"
    assert ei.value.meta == {"attack_id": "meteor"}


def test_attack_damage_must_be_positive():
    with pytest.raises(InvalidArgument):
        Attack(id="fizzle", name="Fizzle", damage=0)
    with pytest.raises(InvalidArgument):
        Attack(id="heal", name="Heal", damage=-3)


def test_duplicate_ids_rejected():
    with pytest.raises(InvalidArgument):
        AttackCatalog([DEFAULT_ATTACKS[0], DEFAULT_ATTACKS[0]])


def test_attacks_are_immutable():
    attack = default_catalog().get_attack("fireball")
    with pytest.raises(AttributeError):
        attack.damage = 99  # type: ignore[misc]
