from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserProfile:
    """Read-only view of a colleague owned by the wider office application."""

    id: int
    name: str
    email: str | None
    avatar_url: str | None
    role: str | None
