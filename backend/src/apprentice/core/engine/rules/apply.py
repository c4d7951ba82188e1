from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from uuid import uuid4

from apprentice.core.engine.catalog import Attack, AttackCatalog
from apprentice.core.engine.commands import (
    Command,
    ResolveEnemyTurn,
    SelectAttack,
    TargetEnemy,
)
from apprentice.core.engine.damage import apply_damage, health_after
from apprentice.core.engine.errors import CombatError
from apprentice.core.engine.events import (
    ev_attack_selected,
    ev_battle_ended,
    ev_entity_defeated,
    ev_health_changed,
    ev_phase_changed,
    ev_round_started,
)
from apprentice.core.engine.outcome import evaluate
from apprentice.core.engine.policy import EnemyActionPolicy
from apprentice.core.engine.state import CombatState, Outcome, Phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Hit:
    source_id: str
    target_id: str
    amount: int
    health_before: int
    health_after: int


@dataclass
class PendingAction:
    """
    Result of begin_action: everything the command will do, computed up front.
    The state only changes when the action is committed.
    """

    command: Command
    phase_before: Phase
    attack: Optional[Attack] = None
    hits: List[Hit] = field(default_factory=list)
    outcome: Outcome = "in_progress"
    action_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def total_damage(self) -> int:
        return sum(h.amount for h in self.hits)


def _bump(state: CombatState) -> Tuple[int, int]:
    state.seq += 1
    state.t += 1
    return state.seq, state.t


def _set_phase(state: CombatState, to_phase: Phase) -> List[dict]:
    from_phase = state.phase
    state.phase = to_phase
    seq, t = _bump(state)
    return [
        ev_phase_changed(
            seq=seq, t=t, round_=state.round, from_phase=from_phase, to_phase=to_phase
        ).model_dump(mode="json")
    ]


def _finish(state: CombatState, outcome: Outcome) -> List[dict]:
    terminal: Phase = "victory" if outcome == "victory" else "defeat"
    state.outcome = outcome
    state.selected_attack_id = None
    events = _set_phase(state, terminal)
    seq, t = _bump(state)
    events.append(
        ev_battle_ended(
            seq=seq, t=t, round_=state.round, phase=state.phase, outcome=outcome
        ).model_dump(mode="json")
    )
    logger.info("Battle ended: %s in round %s", outcome, state.round)
    return events


# ---------- planning (begin_action) ----------


def plan_command(
    state: CombatState,
    cmd: Command,
    *,
    catalog: AttackCatalog,
    policy: EnemyActionPolicy,
) -> PendingAction:
    """
    Compute the full result of an already validated command.
    Enemy rolls are drawn from state.rng here, so they are fixed once planned.
    """
    action = PendingAction(command=cmd, phase_before=state.phase)

    if isinstance(cmd, SelectAttack):
        action.attack = catalog.get_attack(cmd.attack_id)
        return action

    if isinstance(cmd, TargetEnemy):
        attack = catalog.get_attack(state.selected_attack_id or "")
        target = state.enemy(cmd.enemy_id)
        assert target is not None
        after = health_after(target.health, attack.damage)
        action.attack = attack
        action.hits.append(
            Hit(
                source_id=state.player.id,
                target_id=target.id,
                amount=attack.damage,
                health_before=target.health,
                health_after=after,
            )
        )
        remaining = [e for e in state.enemies if e.is_alive and e.id != target.id]
        if after == 0 and not remaining:
            action.outcome = "victory"
        return action

    if isinstance(cmd, ResolveEnemyTurn):
        # only enemies alive right now act this turn
        acting = state.living_enemies()
        projected = state.player.health
        rng_state = state.rng.getstate()
        for enemy in acting:
            try:
                amount = policy.compute_damage(enemy, state.rng)
                after = health_after(projected, amount)
            except CombatError:
                # a rejected turn must not consume rolls
                state.rng.setstate(rng_state)
                raise
            action.hits.append(
                Hit(
                    source_id=enemy.id,
                    target_id=state.player.id,
                    amount=amount,
                    health_before=projected,
                    health_after=after,
                )
            )
            projected = after
            if projected == 0 and state.stop_on_defeat:
                break
        if projected == 0:
            action.outcome = "defeat"
        return action

    raise TypeError(f"Unhandled command: {cmd!r}")


def mark_in_flight(state: CombatState, action: PendingAction) -> None:
    """Phase bookkeeping done at begin_action; no health changes."""
    cmd = action.command
    if isinstance(cmd, TargetEnemy):
        state.phase = "resolving_player_action"
        state.selected_attack_id = None
    elif isinstance(cmd, ResolveEnemyTurn):
        state.phase = "resolving_enemy_action"


# ---------- commit ----------


def _apply_hit(state: CombatState, hit: Hit) -> List[dict]:
    target = state.entity(hit.target_id)
    assert target is not None
    before = target.health
    apply_damage(target, hit.amount)

    seq, t = _bump(state)
    return [
        ev_health_changed(
            seq=seq,
            t=t,
            round_=state.round,
            phase=state.phase,
            source_id=hit.source_id,
            entity_id=target.id,
            previous_health=before,
            new_health=target.health,
            amount=hit.amount,
        ).model_dump(mode="json")
    ]


def commit_action(state: CombatState, action: PendingAction) -> List[dict]:
    """Apply a planned action to the state. Returns the events, as dicts."""
    cmd = action.command
    events: List[dict] = []

    if isinstance(cmd, SelectAttack):
        assert action.attack is not None
        replaced = state.selected_attack_id
        state.selected_attack_id = action.attack.id
        seq, t = _bump(state)
        events.append(
            ev_attack_selected(
                seq=seq,
                t=t,
                round_=state.round,
                phase=state.phase,
                actor_id=state.player.id,
                attack_id=action.attack.id,
                damage=action.attack.damage,
                replaced_attack_id=replaced,
            ).model_dump(mode="json")
        )
        if state.phase != "awaiting_target":
            events.extend(_set_phase(state, "awaiting_target"))
        return events

    if isinstance(cmd, TargetEnemy):
        for hit in action.hits:
            events.extend(_apply_hit(state, hit))
            target = state.enemy(hit.target_id)
            if target is not None and not target.is_alive:
                if target.id not in state.defeated_ids:
                    state.defeated_ids.append(target.id)
                seq, t = _bump(state)
                events.append(
                    ev_entity_defeated(
                        seq=seq,
                        t=t,
                        round_=state.round,
                        phase=state.phase,
                        source_id=hit.source_id,
                        entity_id=target.id,
                    ).model_dump(mode="json")
                )

        if evaluate(state) == "victory":
            events.extend(_finish(state, "victory"))
        else:
            events.extend(_set_phase(state, "enemy_turn"))
        return events

    if isinstance(cmd, ResolveEnemyTurn):
        for hit in action.hits:
            # nothing queued is applied once the battle is decided
            if state.is_closed:
                break
            events.extend(_apply_hit(state, hit))
            if evaluate(state) == "defeat" and state.stop_on_defeat:
                events.extend(_finish(state, "defeat"))

        if state.is_closed:
            return events

        if evaluate(state) == "defeat":
            events.extend(_finish(state, "defeat"))
            return events

        state.round += 1
        events.extend(_set_phase(state, "player_selecting"))
        seq, t = _bump(state)
        events.append(
            ev_round_started(
                seq=seq, t=t, round_=state.round, phase=state.phase
            ).model_dump(mode="json")
        )
        return events

    raise TypeError(f"Unhandled command: {cmd!r}")
