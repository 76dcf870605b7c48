"""Authentication schemas."""

from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["admin", "user"]


class AuthPrincipal(BaseModel):
    """Normalized authenticated principal decoded from a session token."""

    user_id: str = Field(min_length=1)
    role: Role = "user"
    display_name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class SessionUser(BaseModel):
    id: str
    role: Role
    display_name: str


class SessionResponse(BaseModel):
    user: SessionUser | None = None
