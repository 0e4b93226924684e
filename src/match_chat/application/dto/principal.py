from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    user_id: int
    roles: list[str] = field(default_factory=list)

    @property
    def principal_key(self) -> str:
        """Stable identity string used in log lines."""
        return f"user:{self.user_id}"
