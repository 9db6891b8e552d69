from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from messaging_service.domain.value_objects.enums import Role


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    actor_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_claims(cls, payload: dict[str, Any]) -> Principal:
        """Build from decoded JWT claims. Unknown roles raise ValueError."""
        subject = payload.get("sub")
        if not subject:
            raise ValueError("Token has no subject")
        return cls(actor_id=str(subject), role=Role(str(payload.get("role", "")).upper()))
