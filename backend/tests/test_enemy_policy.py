from random import Random

import pytest

from apprentice.core.engine.errors import InvalidArgument
from apprentice.core.engine.policy import UniformDamagePolicy
from apprentice.core.engine.state import CombatEntity

SKELETON = CombatEntity(id="enemy0", name="Skeleton", max_health=15, health=15)


def test_damage_stays_in_5_to_10():
    policy = UniformDamagePolicy()
    rng = Random(42)
    rolls = [policy.compute_damage(SKELETON, rng) for _ in range(500)]
    assert min(rolls) >= 5
    assert max(rolls) <= 10
    # inclusive on both ends
    assert set(rolls) == {5, 6, 7, 8, 9, 10}


def test_same_seed_same_rolls():
    policy = UniformDamagePolicy()
    rng_a, rng_b = Random(7), Random(7)
    a = [policy.compute_damage(SKELETON, rng_a) for _ in range(10)]
    b = [policy.compute_damage(SKELETON, rng_b) for _ in range(10)]
    assert a == b


def test_bad_bounds_rejected():
    with pytest.raises(InvalidArgument):
        UniformDamagePolicy(min_damage=10, max_damage=5)
    with pytest.raises(InvalidArgument):
        UniformDamagePolicy(min_damage=-1, max_damage=5)
