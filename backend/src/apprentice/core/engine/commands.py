# backend/src/apprentice/core/engine/commands.py

from typing import Literal, Union
from pydantic import BaseModel, ConfigDict


class CommandBase(BaseModel):
    model_config = ConfigDict(extra="forbid")
    type: str


class SelectAttack(CommandBase):
    type: Literal["SelectAttack"] = "SelectAttack"
    attack_id: str


class TargetEnemy(CommandBase):
    type: Literal["TargetEnemy"] = "TargetEnemy"
    enemy_id: str


# system step: the caller decides when the enemies act (animation pacing)
class ResolveEnemyTurn(CommandBase):
    type: Literal["ResolveEnemyTurn"] = "ResolveEnemyTurn"


Command = Union[
    SelectAttack,
    TargetEnemy,
    ResolveEnemyTurn,
]
