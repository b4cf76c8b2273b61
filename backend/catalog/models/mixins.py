from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import ColumnElement, DateTime
from sqlalchemy.orm import Mapped, mapped_column


class DiscardState(str, Enum):
    KEPT = "kept"
    DISCARDED = "discarded"


class SoftDeleteMixin:
    """Soft-delete support backed by a nullable ``discarded_at`` timestamp.

    ``discard_state`` is the typed view of the timestamp. Queries should filter
    through :meth:`kept_clause` rather than testing ``discarded_at`` directly.
    """

    discarded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def discard_state(self) -> DiscardState:
        return DiscardState.KEPT if self.discarded_at is None else DiscardState.DISCARDED

    @property
    def is_kept(self) -> bool:
        return self.discard_state is DiscardState.KEPT

    @classmethod
    def kept_clause(cls) -> ColumnElement[bool]:
        return cls.discarded_at.is_(None)

    def discard(self, *, at: datetime | None = None) -> datetime:
        self.discarded_at = at or datetime.now(UTC)
        return self.discarded_at
