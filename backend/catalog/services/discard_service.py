from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.core.metrics import portfolio_discard_total
from catalog.models.portfolio import Portfolio
from catalog.models.portfolio_item import PortfolioItem
from catalog.services.errors import ValidationError, add_error
from catalog.services.scoping import tenant_scoped


logger = logging.getLogger("catalog.discard")


class CascadeState(str, Enum):
    KEPT = "kept"
    DISCARDING = "discarding"
    DISCARDED = "discarded"
    DISCARD_ABORTED = "discard_aborted"


@dataclass(frozen=True)
class ItemDiscardResult:
    item_id: str
    name: str | None
    discarded: bool

    def failure_message(self) -> str:
        return f"item {self.name or ''} (id {self.item_id}) failed to be discarded."


@dataclass(frozen=True)
class CascadeOutcome:
    portfolio_id: str
    state: CascadeState
    discarded_at: datetime | None = None
    results: tuple[ItemDiscardResult, ...] = ()

    @property
    def failures(self) -> tuple[ItemDiscardResult, ...]:
        return tuple(result for result in self.results if not result.discarded)


class CascadeAbortedError(ValidationError):
    def __init__(self, outcome: CascadeOutcome) -> None:
        errors: dict[str, list[str]] = {}
        for failure in outcome.failures:
            add_error(errors, failure.item_id, failure.failure_message())
        super().__init__(errors, message="Portfolio items failed to be discarded")
        self.outcome = outcome


# Marks one item discarded in the session (without committing) and reports success.
ItemDiscarder = Callable[[Session, PortfolioItem, datetime], bool]


def discard_item(_db: Session, item: PortfolioItem, discarded_at: datetime) -> bool:
    item.discard(at=discarded_at)
    return True


def discard_portfolio_cascade(
    db: Session,
    portfolio: Portfolio,
    *,
    tenant_id: str,
    item_discarder: ItemDiscarder | None = None,
) -> CascadeOutcome:
    """Discard ``portfolio`` and every kept item under it as one transaction.

    Only kept items owned by ``tenant_id`` take part, the same set
    ``list_portfolio_items`` returns. Each one is handed to
    ``item_discarder``. If every item reports success the portfolio is
    stamped with the same timestamp and the session is committed once. If any item fails the session is rolled back, so
    neither the portfolio nor any of its items change, and a
    :class:`CascadeAbortedError` lists every failed item.
    """
    discarder = item_discarder or discard_item
    if not portfolio.is_kept:
        return CascadeOutcome(portfolio_id=portfolio.id, state=CascadeState.DISCARDED, discarded_at=portfolio.discarded_at)

    portfolio_id = portfolio.id
    discarded_at = datetime.now(UTC)
    logger.info(
        "portfolio discard started",
        extra={"portfolio_id": portfolio_id, "tenant_id": tenant_id, "cascade_state": CascadeState.DISCARDING.value},
    )

    kept_items = (
        tenant_scoped(db, PortfolioItem, tenant_id=tenant_id)
        .filter(PortfolioItem.portfolio_id == portfolio_id)
        .order_by(PortfolioItem.created_at.asc())
        .all()
    )
    results = tuple(_attempt_item_discard(db, discarder, item, discarded_at) for item in kept_items)

    if any(not result.discarded for result in results):
        db.rollback()
        outcome = CascadeOutcome(portfolio_id=portfolio_id, state=CascadeState.DISCARD_ABORTED, results=results)
        portfolio_discard_total.labels(outcome=outcome.state.value).inc()
        logger.error(
            "Failed to discard items from Portfolio %s - not discarding portfolio",
            portfolio_id,
            extra={
                "portfolio_id": portfolio_id,
                "cascade_state": outcome.state.value,
                "failed_item_ids": [failure.item_id for failure in outcome.failures],
            },
        )
        raise CascadeAbortedError(outcome)

    portfolio.discard(at=discarded_at)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        portfolio_discard_total.labels(outcome=CascadeState.DISCARD_ABORTED.value).inc()
        logger.exception("portfolio discard commit failed", extra={"portfolio_id": portfolio_id})
        raise

    portfolio_discard_total.labels(outcome=CascadeState.DISCARDED.value).inc()
    logger.info(
        "portfolio discarded",
        extra={"portfolio_id": portfolio_id, "cascade_state": CascadeState.DISCARDED.value},
    )
    return CascadeOutcome(
        portfolio_id=portfolio_id,
        state=CascadeState.DISCARDED,
        discarded_at=discarded_at,
        results=results,
    )


def _attempt_item_discard(
    db: Session,
    discarder: ItemDiscarder,
    item: PortfolioItem,
    discarded_at: datetime,
) -> ItemDiscardResult:
    item_id = item.id
    name = item.name
    try:
        discarded = bool(discarder(db, item, discarded_at))
    except SQLAlchemyError:
        logger.warning("portfolio item discard failed", extra={"portfolio_item_id": item_id}, exc_info=True)
        discarded = False
    return ItemDiscardResult(item_id=item_id, name=name, discarded=discarded)
