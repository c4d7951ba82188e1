from __future__ import annotations

import logging
from random import Random
from typing import Callable, List, Optional, Sequence, Tuple
from uuid import uuid4

from apprentice.core.engine.catalog import Attack, AttackCatalog, default_catalog
from apprentice.core.engine.commands import (
    Command,
    ResolveEnemyTurn,
    SelectAttack,
    TargetEnemy,
)
from apprentice.core.engine.errors import InvalidState
from apprentice.core.engine.events import ev_session_started
from apprentice.core.engine.outcome import evaluate
from apprentice.core.engine.policy import DEFAULT_POLICY, EnemyActionPolicy
from apprentice.core.engine.rules.apply import (
    PendingAction,
    commit_action,
    mark_in_flight,
    plan_command,
)
from apprentice.core.engine.rules.validator import validate_command
from apprentice.core.engine.state import (
    CombatEntity,
    CombatState,
    Outcome,
    Phase,
    SessionConfig,
    build_state,
)

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict], None]


class CombatSession:
    """
    One battle encounter, from the first attack pick to Victory or Defeat.

    Every command goes through two steps:

      action = session.begin_action(cmd)   # validate + compute, nothing visible yet
      events = session.commit(action)      # state advances, subscribers notified

    The presentation layer can wait between the two (animations); the engine
    never sleeps. select_attack / target_enemy / resolve_enemy_turn do both
    steps at once.
    """

    def __init__(
        self,
        state: CombatState,
        *,
        catalog: Optional[AttackCatalog] = None,
        policy: Optional[EnemyActionPolicy] = None,
        session_id: Optional[str] = None,
        history: Optional[Sequence[dict]] = None,
    ) -> None:
        self.session_id = session_id or uuid4().hex
        self._state = state
        self._catalog = catalog if catalog is not None else default_catalog()
        self._policy = policy if policy is not None else DEFAULT_POLICY
        self._in_flight: Optional[PendingAction] = None
        self._events: List[dict] = list(history or [])
        self._subscribers: List[Tuple[Optional[str], EventHandler]] = []

    # ---------- read side ----------

    @property
    def state(self) -> CombatState:
        return self._state

    @property
    def catalog(self) -> AttackCatalog:
        return self._catalog

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def player(self) -> CombatEntity:
        return self._state.player

    @property
    def enemies(self) -> List[CombatEntity]:
        return list(self._state.enemies)

    @property
    def selected_attack(self) -> Optional[Attack]:
        if self._state.selected_attack_id is None:
            return None
        return self._catalog.get_attack(self._state.selected_attack_id)

    @property
    def outcome(self) -> Outcome:
        return self._state.outcome

    @property
    def is_closed(self) -> bool:
        return self._state.is_closed

    @property
    def in_flight(self) -> Optional[PendingAction]:
        return self._in_flight

    @property
    def events(self) -> List[dict]:
        return list(self._events)

    def evaluate(self) -> Outcome:
        return evaluate(self._state)

    def targetable_ids(self) -> List[str]:
        return self._state.targetable_ids()

    # ---------- subscribers ----------

    def subscribe(
        self, handler: EventHandler, event_type: Optional[str] = None
    ) -> Callable[[], None]:
        entry = (event_type, handler)
        self._subscribers.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    def _publish(self, events: List[dict]) -> None:
        for event in events:
            for event_type, handler in list(self._subscribers):
                if event_type is not None and event_type != event.get("type"):
                    continue
                try:
                    handler(event)
                except Exception:
                    # a broken renderer must not break the battle
                    logger.exception(
                        "Event handler failed for %s in session %s",
                        event.get("type"),
                        self.session_id,
                    )

    # ---------- two-step protocol ----------

    def begin_action(self, cmd: Command) -> PendingAction:
        vr = validate_command(
            self._state,
            cmd,
            catalog=self._catalog,
            in_flight=self._in_flight is not None,
        )
        if not vr.ok:
            err = vr.errors[0]
            logger.debug(
                "Rejected %s in session %s: %s", cmd.type, self.session_id, err.code
            )
            raise err.to_exception()

        action = plan_command(
            self._state, cmd, catalog=self._catalog, policy=self._policy
        )
        mark_in_flight(self._state, action)
        self._in_flight = action
        logger.debug(
            "Began %s in session %s (phase %s)", cmd.type, self.session_id, self.phase
        )
        return action

    def commit(self, action: Optional[PendingAction] = None) -> List[dict]:
        pending = self._in_flight
        if pending is None:
            raise InvalidState("Nothing to commit", code="NOTHING_IN_FLIGHT")
        if action is not None and action.action_id != pending.action_id:
            raise InvalidState(
                "Action is not the one in flight",
                code="NOTHING_IN_FLIGHT",
                meta={"action_id": action.action_id},
            )

        events = commit_action(self._state, pending)
        self._in_flight = None
        self._events.extend(events)
        self._publish(events)
        return events

    def execute(self, cmd: Command) -> List[dict]:
        self.begin_action(cmd)
        return self.commit()

    # ---------- commands ----------

    def select_attack(self, attack_id: str) -> List[dict]:
        return self.execute(SelectAttack(attack_id=attack_id))

    def target_enemy(self, enemy_id: str) -> List[dict]:
        return self.execute(TargetEnemy(enemy_id=enemy_id))

    def resolve_enemy_turn(self) -> List[dict]:
        return self.execute(ResolveEnemyTurn())

    def _record_start(self) -> None:
        st = self._state
        st.seq += 1
        st.t += 1
        self._events.append(
            ev_session_started(
                seq=st.seq,
                t=st.t,
                round_=st.round,
                phase=st.phase,
                player_id=st.player.id,
                enemy_ids=[e.id for e in st.enemies],
            ).model_dump(mode="json")
        )


def start_session(
    config: SessionConfig,
    *,
    catalog: Optional[AttackCatalog] = None,
    policy: Optional[EnemyActionPolicy] = None,
    rng: Optional[Random] = None,
    session_id: Optional[str] = None,
) -> CombatSession:
    state = build_state(config, rng=rng)
    session = CombatSession(
        state, catalog=catalog, policy=policy, session_id=session_id
    )
    session._record_start()
    logger.info(
        "Battle %s started: player %s hp, enemies %s (seed %s)",
        session.session_id,
        config.player_max_health,
        [e.max_health for e in config.enemies],
        state.rng_seed,
    )
    return session