import pytest

from apprentice.core.engine.commands import ResolveEnemyTurn, SelectAttack, TargetEnemy
from apprentice.core.engine.errors import ConcurrentCommand, InvalidState
from apprentice.core.engine.session import start_session
from apprentice.core.engine.state import SessionConfig


def test_begin_computes_result_without_applying_damage():
    s = start_session(SessionConfig.reference(seed=99))
    s.select_attack("water_blast")

    action = s.begin_action(TargetEnemy(enemy_id="enemy2"))
    assert action.attack.id == "water_blast"
    assert len(action.hits) == 1
    hit = action.hits[0]
    assert (hit.target_id, hit.amount, hit.health_before, hit.health_after) == (
        "enemy2",
        8,
        15,
        7,
    )

    # in flight: phase shows the resolution, health not touched yet
    assert s.phase == "resolving_player_action"
    assert s.state.selected_attack_id is None
    assert s.state.enemy("enemy2").health == 15
    assert s.events[-1]["type"] == "AttackSelected"

    events = s.commit(action)
    assert s.state.enemy("enemy2").health == 7
    assert s.phase == "enemy_turn"
    assert events[0]["type"] == "HealthChanged"
    assert s.in_flight is None


def test_second_command_while_in_flight_is_rejected():
    s = start_session(SessionConfig.reference(seed=5))
    s.select_attack("fireball")
    s.begin_action(TargetEnemy(enemy_id="enemy0"))

    with pytest.raises(ConcurrentCommand):
        s.begin_action(SelectAttack(attack_id="fireball"))
    with pytest.raises(ConcurrentCommand):
        s.target_enemy("enemy1")

    s.commit()
    assert s.state.enemy("enemy0").health == 7
    assert s.state.enemy("enemy1").health == 15


def test_enemy_turn_rolls_are_fixed_at_begin():
    s = start_session(SessionConfig.reference(seed=2024))
    s.select_attack("fireball")
    s.target_enemy("enemy0")

    action = s.begin_action(ResolveEnemyTurn())
    assert s.phase == "resolving_enemy_action"
    assert [h.source_id for h in action.hits] == ["enemy0", "enemy1", "enemy2"]
    assert s.player.health == 50

    events = s.commit(action)
    applied = [e["payload"]["amount"] for e in events if e["type"] == "HealthChanged"]
    assert applied == [h.amount for h in action.hits]
    assert s.player.health == 50 - action.total_damage


def test_commit_without_begin_fails():
    s = start_session(SessionConfig.reference(seed=1))
    with pytest.raises(InvalidState):
        s.commit()


def test_commit_of_stale_action_fails():
    s = start_session(SessionConfig.reference(seed=1))
    first = s.begin_action(SelectAttack(attack_id="fireball"))
    s.commit(first)

    s.begin_action(TargetEnemy(enemy_id="enemy0"))
    with pytest.raises(InvalidState):
        s.commit(first)
    # the real in-flight action is still there
    assert s.in_flight is not None
    s.commit()
    assert s.phase == "enemy_turn"


def test_execute_accepts_pydantic_commands():
    s = start_session(SessionConfig.reference(seed=3))
    s.execute(SelectAttack(attack_id="wind_cutter"))
    s.execute(TargetEnemy(enemy_id="enemy1"))
    assert s.state.enemy("enemy1").health == 9
    s.execute(ResolveEnemyTurn())
    assert s.phase == "player_selecting"
