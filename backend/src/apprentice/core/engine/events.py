from __future__ import annotations

from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, ConfigDict


class EventEnvelope(BaseModel):
    model_config = ConfigDict(extra="forbid")

    event_id: UUID = Field(default_factory=uuid4)
    seq: int
    t: int
    type: str

    round: int
    phase: str
    actor_id: Optional[str] = None

    payload: dict[str, Any] = Field(default_factory=dict)


def ev_session_started(
    *,
    seq: int,
    t: int,
    round_: int,
    phase: str,
    player_id: str,
    enemy_ids: list[str],
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        t=t,
        type="SessionStarted",
        round=round_,
        phase=phase,
        actor_id=None,
        payload={"player_id": player_id, "enemy_ids": list(enemy_ids)},
    )


def ev_attack_selected(
    *,
    seq: int,
    t: int,
    round_: int,
    phase: str,
    actor_id: str,
    attack_id: str,
    damage: int,
    replaced_attack_id: Optional[str] = None,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        t=t,
        type="AttackSelected",
        round=round_,
        phase=phase,
        actor_id=actor_id,
        payload={
            "attack_id": attack_id,
            "damage": damage,
            "replaced_attack_id": replaced_attack_id,
        },
    )


def ev_health_changed(
    *,
    seq: int,
    t: int,
    round_: int,
    phase: str,
    source_id: str,
    entity_id: str,
    previous_health: int,
    new_health: int,
    amount: int,
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        t=t,
        type="HealthChanged",
        round=round_,
        phase=phase,
        actor_id=source_id,
        payload={
            "entity_id": entity_id,
            "new_health": new_health,
            "previous_health": previous_health,
            "amount": amount,
            "source_id": source_id,
        },
    )


def ev_entity_defeated(
    *, seq: int, t: int, round_: int, phase: str, source_id: str, entity_id: str
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        t=t,
        type="EntityDefeated",
        round=round_,
        phase=phase,
        actor_id=source_id,
        payload={"entity_id": entity_id},
    )


def ev_phase_changed(
    *, seq: int, t: int, round_: int, from_phase: str, to_phase: str
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        t=t,
        type="PhaseChanged",
        round=round_,
        phase=to_phase,
        actor_id=None,
        payload={"from": from_phase, "to": to_phase},
    )


def ev_round_started(*, seq: int, t: int, round_: int, phase: str) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        t=t,
        type="RoundStarted",
        round=round_,
        phase=phase,
        actor_id=None,
        payload={"round": round_},
    )


def ev_battle_ended(
    *, seq: int, t: int, round_: int, phase: str, outcome: str
) -> EventEnvelope:
    return EventEnvelope(
        seq=seq,
        t=t,
        type="BattleEnded",
        round=round_,
        phase=phase,
        actor_id=None,
        payload={"outcome": outcome},
    )
