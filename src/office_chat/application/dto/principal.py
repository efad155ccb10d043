from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    subject_id: int
    role: str = "employee"

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> Principal:
        raw_id = claims.get("sub", claims.get("id"))
        if raw_id is None:
            raise ValueError("Token has no subject")
        return cls(subject_id=int(raw_id), role=str(claims.get("role", "employee")))
