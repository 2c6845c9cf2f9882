"""
Outcome of a token exchange or refresh. Flows return this instead of raising.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class TokenResult:
    success: bool
    error: str | None = None
    access_token: str | None = None
    id_token: str | None = None
    refresh_token: str | None = None

    @classmethod
    def failure(cls, error: str) -> "TokenResult":
        return cls(success=False, error=error)

    @classmethod
    def from_payload(cls, data: dict) -> "TokenResult":
        """Success result from a token endpoint JSON body."""
        return cls(
            success=True,
            access_token=data.get("access_token"),
            id_token=data.get("id_token"),
            refresh_token=data.get("refresh_token"),
        )
