from __future__ import annotations

from typing import Protocol

from messaging_service.application.dto.principal import Principal


class TokenVerifier(Protocol):
    """Turns a bearer token into a Principal.

    Implementations raise on a bad signature, an expired token or a role
    claim outside ``Role``; the API layer maps any of these to 401.
    """

    async def verify(self, token: str) -> Principal: ...
