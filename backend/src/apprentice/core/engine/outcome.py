from __future__ import annotations

from apprentice.core.engine.state import CombatState, Outcome


def evaluate(state: CombatState) -> Outcome:
    # defeat wins a tie; the turn order never produces one
    if not state.player.is_alive:
        return "defeat"
    if all(not e.is_alive for e in state.enemies):
        return "victory"
    return "in_progress"
