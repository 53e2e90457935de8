"""Pydantic schemas for the Google login flow."""

import uuid
from typing import Any, Optional

from pydantic import BaseModel, Field

from notekeeper.schemas.validation import Validated, validate


class CallbackRequest(BaseModel):
    # Extra fields are ignored here; the frontend may forward the whole
    # Google redirect query (state, scope, authuser, ...)
    code: str = Field(..., min_length=1)


def parse_callback(payload: Any) -> Validated[CallbackRequest]:
    return validate(CallbackRequest, payload)


class AuthUrlResponse(BaseModel):
    auth_url: str
    message: str = "Redirect users to this URL for Google authentication"


class LoginUser(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    role: str
    picture: Optional[str] = None

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: str = Field("7d", alias="expiresIn")
    user: LoginUser

    model_config = {"populate_by_name": True}


class TokenValid(BaseModel):
    valid: bool = True
    message: str = "Token is valid"
