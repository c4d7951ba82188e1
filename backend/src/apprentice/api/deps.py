from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException

from apprentice.core.engine.errors import CombatError, InvalidArgument, NotFound
from apprentice.settings import get_settings


class MessageError(Exception):
    """Save-slot errors; rendered as {"message": ...} like the browser client expects."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    # token auth lives in front of this service; it forwards the user id
    if not x_user_id or not x_user_id.strip():
        raise MessageError(401, "Unauthorized")
    return x_user_id.strip()


def check_slot_number(slot_number: int) -> int:
    count = get_settings().save_slot_count
    if slot_number < 1 or slot_number > count:
        raise MessageError(422, f"slotNumber must be between 1 and {count}")
    return slot_number


def http_error_for(err: CombatError) -> HTTPException:
    if isinstance(err, NotFound):
        status = 404
    elif isinstance(err, InvalidArgument):
        status = 422
    else:
        status = 409
    return HTTPException(status_code=status, detail=err.to_dict())
