"""Pydantic schemas for users.

external_id is never part of a response.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from notekeeper.schemas.validation import Validated, validate


class UserRead(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    picture: Optional[str] = None
    role: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DeletedUser(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    role: str

    model_config = {"from_attributes": True}


class UserDeleted(BaseModel):
    message: str = "User deleted successfully"
    deleted_user: DeletedUser


class RoleChange(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    # Checked against UserRole by the service, which owns the 400 message
    role: str


def parse_role_change(payload: Any) -> Validated[RoleChange]:
    return validate(RoleChange, payload)
