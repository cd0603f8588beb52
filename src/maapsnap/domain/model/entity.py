"""
Base building blocks:
identity shared by every persisted record.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False, kw_only=True)
class Entity:
    """Database identity; ``None`` until the record has been persisted."""

    id: int | None = None

    @property
    def persisted(self) -> bool:
        return self.id is not None

    def require_id(self) -> int:
        if self.id is None:
            raise ValueError(f"{type(self).__name__} has not been persisted yet")
        return self.id
