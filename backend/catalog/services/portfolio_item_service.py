from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from catalog.models.portfolio_item import PortfolioItem
from catalog.services.errors import NotFoundError, ValidationError, add_error
from catalog.services.portfolio_service import get_portfolio
from catalog.services.scoping import tenant_scoped


logger = logging.getLogger("catalog.portfolio_items")

PORTFOLIO_ITEM_MUTABLE_FIELDS = (
    "name",
    "description",
    "long_description",
    "distributor",
    "documentation_url",
    "support_url",
    "workflow_ref",
)
PORTFOLIO_ITEM_CREATE_FIELDS = PORTFOLIO_ITEM_MUTABLE_FIELDS + ("service_offering_ref", "service_offering_source_ref")


def create_portfolio_item(
    db: Session,
    *,
    tenant_id: str,
    portfolio_id: str,
    attributes: Mapping[str, Any],
) -> PortfolioItem:
    portfolio = get_portfolio(db, tenant_id=tenant_id, portfolio_id=portfolio_id)
    values = {field: attributes[field] for field in PORTFOLIO_ITEM_CREATE_FIELDS if field in attributes}

    errors: dict[str, list[str]] = {}
    offering_ref = values.get("service_offering_ref")
    if offering_ref is None or not str(offering_ref).strip():
        add_error(errors, "service_offering_ref", "can't be blank")
    if errors:
        raise ValidationError(errors)

    row = PortfolioItem(tenant_id=portfolio.tenant_id, portfolio_id=portfolio.id, **values)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(
        "portfolio item created",
        extra={"tenant_id": tenant_id, "portfolio_id": portfolio.id, "portfolio_item_id": row.id},
    )
    return row


def get_portfolio_item(
    db: Session,
    *,
    tenant_id: str,
    portfolio_item_id: str,
    include_discarded: bool = False,
) -> PortfolioItem:
    row = (
        tenant_scoped(db, PortfolioItem, tenant_id=tenant_id, include_discarded=include_discarded)
        .filter(PortfolioItem.id == portfolio_item_id)
        .first()
    )
    if row is None:
        raise NotFoundError("PortfolioItem", portfolio_item_id)
    return row


def list_portfolio_items(db: Session, *, tenant_id: str, include_discarded: bool = False) -> list[PortfolioItem]:
    return (
        tenant_scoped(db, PortfolioItem, tenant_id=tenant_id, include_discarded=include_discarded)
        .order_by(PortfolioItem.created_at.asc())
        .all()
    )


def update_portfolio_item(
    db: Session,
    *,
    tenant_id: str,
    portfolio_item_id: str,
    patch: Mapping[str, Any],
) -> PortfolioItem:
    """Apply a partial update. Keys outside the mutable whitelist are dropped, not rejected."""
    row = get_portfolio_item(db, tenant_id=tenant_id, portfolio_item_id=portfolio_item_id)
    ignored = sorted(key for key in patch if key not in PORTFOLIO_ITEM_MUTABLE_FIELDS)
    if ignored:
        logger.debug("ignoring read-only portfolio item fields: %s", ", ".join(ignored))
    for field in PORTFOLIO_ITEM_MUTABLE_FIELDS:
        if field in patch:
            setattr(row, field, patch[field])
    db.commit()
    db.refresh(row)
    return row


def discard_portfolio_item(db: Session, *, tenant_id: str, portfolio_item_id: str) -> PortfolioItem:
    row = get_portfolio_item(db, tenant_id=tenant_id, portfolio_item_id=portfolio_item_id)
    row.discard()
    db.commit()
    db.refresh(row)
    logger.info("portfolio item discarded", extra={"tenant_id": tenant_id, "portfolio_item_id": row.id})
    return row
