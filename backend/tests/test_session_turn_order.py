import pytest

from apprentice.core.engine.errors import InvalidState, InvalidTarget, NotFound, SessionClosed
from apprentice.core.engine.session import start_session
from apprentice.core.engine.state import EnemyConfig, SessionConfig


class ScriptedPolicy:
    """Hands out the given amounts in order and remembers who attacked."""

    def __init__(self, *amounts):
        self.amounts = list(amounts)
        self.calls = []

    def compute_damage(self, enemy, rng):
        amount = self.amounts[len(self.calls) % len(self.amounts)]
        self.calls.append(enemy.id)
        return amount


def _session(player=50, enemies=(15, 15, 15), policy=None, seed=1234, **kw):
    config = SessionConfig(
        player_max_health=player,
        enemies=[EnemyConfig(max_health=h) for h in enemies],
        seed=seed,
        **kw,
    )
    return start_session(config, policy=policy)


def test_fireball_on_first_skeleton_hands_over_to_enemies():
    s = _session()
    assert s.phase == "player_selecting"

    s.select_attack("fireball")
    assert s.phase == "awaiting_target"
    assert s.selected_attack is not None and s.selected_attack.damage == 8

    events = s.target_enemy("enemy0")
    assert s.state.enemy("enemy0").health == 7
    assert s.phase == "enemy_turn"
    assert s.selected_attack is None

    types = [e["type"] for e in events]
    assert types == ["HealthChanged", "PhaseChanged"]
    assert events[0]["payload"]["entity_id"] == "enemy0"
    assert events[0]["payload"]["new_health"] == 7


def test_enemy_turn_rolls_three_hits_and_returns_to_player():
    s = _session()
    s.select_attack("fireball")
    s.target_enemy("enemy0")

    events = s.resolve_enemy_turn()
    hits = [e for e in events if e["type"] == "HealthChanged"]
    assert len(hits) == 3
    assert [h["actor_id"] for h in hits] == ["enemy0", "enemy1", "enemy2"]

    rolls = [h["payload"]["amount"] for h in hits]
    assert all(5 <= r <= 10 for r in rolls)
    assert s.player.health == 50 - sum(rolls)
    assert s.player.health >= 20

    assert s.phase == "player_selecting"
    assert s.selected_attack is None
    assert s.state.round == 2
    assert events[-1]["type"] == "RoundStarted"


def test_killing_the_last_enemy_wins_and_closes_the_session():
    s = _session(enemies=(5,))
    s.select_attack("rock_throw")
    events = s.target_enemy("enemy0")

    types = [e["type"] for e in events]
    assert types == ["HealthChanged", "EntityDefeated", "PhaseChanged", "BattleEnded"]
    assert events[-1]["payload"]["outcome"] == "victory"
    assert s.state.enemy("enemy0").health == 0
    assert s.outcome == "victory"
    assert s.phase == "victory"
    assert s.is_closed

    with pytest.raises(SessionClosed):
        s.select_attack("fireball")


def test_target_without_selection_is_bad_phase():
    s = _session()
    with pytest.raises(InvalidState) as ei:
        s.target_enemy("enemy0")
    assert ei.value.code == "BAD_PHASE"
    assert s.phase == "player_selecting"
    assert s.state.enemy("enemy0").health == 15


def test_defeated_enemy_cannot_be_targeted():
    policy = ScriptedPolicy(5)
    s = _session(enemies=(5, 15), policy=policy)

    s.select_attack("rock_throw")
    events = s.target_enemy("enemy0")
    assert "EntityDefeated" in [e["type"] for e in events]
    assert s.phase == "enemy_turn"
    assert s.targetable_ids() == ["enemy1"]

    s.resolve_enemy_turn()
    # the dead skeleton does not act
    assert policy.calls == ["enemy1"]

    s.select_attack("fireball")
    with pytest.raises(InvalidTarget) as ei:
        s.target_enemy("enemy0")
    assert ei.value.code == "TARGET_DEFEATED"

    # rejected command leaves the selection in place
    assert s.phase == "awaiting_target"
    assert s.selected_attack.id == "fireball"


def test_unknown_ids():
    s = _session()
    with pytest.raises(NotFound):
        s.select_attack("meteor")
    assert s.phase == "player_selecting"

    s.select_attack("fireball")
    with pytest.raises(NotFound):
        s.target_enemy("enemy9")
    with pytest.raises(NotFound):
        s.target_enemy("player")
    assert s.phase == "awaiting_target"


def test_reselect_replaces_pending_attack():
    s = _session()
    s.select_attack("fireball")
    events = s.select_attack("wind_cutter")

    assert s.phase == "awaiting_target"
    assert [e["type"] for e in events] == ["AttackSelected"]
    assert events[0]["payload"]["replaced_attack_id"] == "fireball"

    s.target_enemy("enemy1")
    assert s.state.enemy("enemy1").health == 15 - 6


def test_damage_matches_attack_for_every_pair():
    for attack_id, dmg in [("fireball", 8), ("wind_cutter", 6), ("water_blast", 8), ("rock_throw", 10)]:
        for idx in range(3):
            s = _session()
            enemy_id = f"enemy{idx}"
            prior = s.state.enemy(enemy_id).health
            s.select_attack(attack_id)
            s.target_enemy(enemy_id)
            assert s.state.enemy(enemy_id).health == max(0, prior - dmg)


def test_enemy_turn_only_when_phase_allows():
    s = _session()
    with pytest.raises(InvalidState):
        s.resolve_enemy_turn()
    s.select_attack("fireball")
    with pytest.raises(InvalidState):
        s.resolve_enemy_turn()
    s.target_enemy("enemy0")
    # player may not act during the enemy turn
    with pytest.raises(InvalidState):
        s.select_attack("fireball")


def test_full_battle_until_victory():
    policy = ScriptedPolicy(5)
    s = _session(policy=policy)

    # 15 hp skeletons: two rock throws each
    order = ["enemy0", "enemy0", "enemy1", "enemy1", "enemy2", "enemy2"]
    for i, target in enumerate(order):
        s.select_attack("rock_throw")
        s.target_enemy(target)
        if i < len(order) - 1:
            s.resolve_enemy_turn()

    assert s.outcome == "victory"
    assert all(e.health == 0 for e in s.enemies)
    # victory is decided before any enemy turn runs
    with pytest.raises(SessionClosed):
        s.resolve_enemy_turn()
    assert s.player.health > 0
