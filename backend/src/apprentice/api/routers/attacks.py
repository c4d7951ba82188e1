from __future__ import annotations

from fastapi import APIRouter

from apprentice.api.schemas import AttackOut
from apprentice.core.engine.catalog import default_catalog

router = APIRouter(prefix="/attacks", tags=["attacks"])

_CATALOG = default_catalog()


@router.get("", response_model=list[AttackOut])
def list_attacks():
    return [
        AttackOut(id=a.id, name=a.name, damage=a.damage)
        for a in _CATALOG.list_attacks()
    ]
