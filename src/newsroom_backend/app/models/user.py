# src/newsroom_backend/app/models/user.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

FACEBOOK = "Facebook"

# privilege levels carried in session tokens
PRIVILEGE_REGISTERED = 1
PRIVILEGE_ADMIN = 10


class OAuthAccount(BaseModel):
    """
    External identity, derived fresh from each identity-provider response.
    (type, a_id) identifies the account.
    """

    model_config = ConfigDict(from_attributes=True)

    type: str
    a_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    picture: Optional[str] = None


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    privilege: int = PRIVILEGE_REGISTERED
    active: bool = True


def gender_code(value: Optional[str]) -> Optional[str]:
    """Map a provider gender string to M / F / O; empty -> None."""
    if not value:
        return None
    if value == "male":
        return "M"
    if value == "female":
        return "F"
    return "O"
