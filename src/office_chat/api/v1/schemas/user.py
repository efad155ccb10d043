from __future__ import annotations

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: int
    name: str
    role: str | None
    avatar: str | None
