from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.core.config import get_settings
from catalog.models.portfolio import Portfolio
from catalog.models.portfolio_item import PortfolioItem
from catalog.services.discard_service import CascadeOutcome, ItemDiscarder, discard_portfolio_cascade
from catalog.services.errors import NotFoundError, ValidationError, add_error
from catalog.services.scoping import tenant_scoped


logger = logging.getLogger("catalog.portfolios")

PORTFOLIO_MUTABLE_FIELDS = ("name", "description", "image_url", "enabled")

_BOOLEAN_LITERAL = re.compile(r"\A(true|false)\Z", re.IGNORECASE)
_URI_SCHEME = re.compile(r"\A[A-Za-z][A-Za-z0-9+.\-]*\Z")
NAME_MAX_LENGTH = 255
IMAGE_URL_MAX_LENGTH = 2048


def create_portfolio(db: Session, *, tenant_id: str, attributes: Mapping[str, Any]) -> Portfolio:
    values = _permitted(attributes)
    errors = _validate(db, tenant_id=tenant_id, values=values)
    if errors:
        raise ValidationError(errors)

    row = Portfolio(tenant_id=tenant_id, **_typecast(values))
    db.add(row)
    _commit_or_raise_name_taken(db)
    db.refresh(row)
    logger.info("portfolio created", extra={"tenant_id": tenant_id, "portfolio_id": row.id})
    return row


def get_portfolio(db: Session, *, tenant_id: str, portfolio_id: str, include_discarded: bool = False) -> Portfolio:
    row = (
        tenant_scoped(db, Portfolio, tenant_id=tenant_id, include_discarded=include_discarded)
        .filter(Portfolio.id == portfolio_id)
        .first()
    )
    if row is None:
        raise NotFoundError("Portfolio", portfolio_id)
    return row


def list_portfolios(db: Session, *, tenant_id: str, include_discarded: bool = False) -> list[Portfolio]:
    return (
        tenant_scoped(db, Portfolio, tenant_id=tenant_id, include_discarded=include_discarded)
        .order_by(Portfolio.created_at.asc())
        .all()
    )


def update_portfolio(db: Session, *, tenant_id: str, portfolio_id: str, patch: Mapping[str, Any]) -> Portfolio:
    row = get_portfolio(db, tenant_id=tenant_id, portfolio_id=portfolio_id)
    values = _permitted(patch)
    errors = _validate(db, tenant_id=tenant_id, values=values, current=row)
    if errors:
        raise ValidationError(errors)

    for field, value in _typecast(values).items():
        setattr(row, field, value)
    _commit_or_raise_name_taken(db)
    db.refresh(row)
    return row


def list_portfolio_items(db: Session, *, tenant_id: str, portfolio_id: str) -> list[PortfolioItem]:
    portfolio = get_portfolio(db, tenant_id=tenant_id, portfolio_id=portfolio_id)
    return (
        tenant_scoped(db, PortfolioItem, tenant_id=tenant_id)
        .filter(PortfolioItem.portfolio_id == portfolio.id)
        .order_by(PortfolioItem.created_at.asc())
        .all()
    )


def add_portfolio_item(db: Session, *, tenant_id: str, portfolio_id: str, portfolio_item_id: str) -> PortfolioItem:
    """Re-parent an existing item under ``portfolio_id``.

    The item is looked up by id alone unless ``catalog_strict_reparent_tenant``
    is enabled, so an item owned by another portfolio silently moves.
    """
    portfolio = get_portfolio(db, tenant_id=tenant_id, portfolio_id=portfolio_id)
    if get_settings().catalog_strict_reparent_tenant:
        query = tenant_scoped(db, PortfolioItem, tenant_id=tenant_id)
    else:
        query = db.query(PortfolioItem).filter(PortfolioItem.kept_clause())
    item = query.filter(PortfolioItem.id == portfolio_item_id).first()
    if item is None:
        raise NotFoundError("PortfolioItem", portfolio_item_id)

    previous_portfolio_id = item.portfolio_id
    item.portfolio_id = portfolio.id
    db.commit()
    db.refresh(item)
    if item.tenant_id != tenant_id:
        logger.warning(
            "portfolio item re-parented across tenants",
            extra={"tenant_id": tenant_id, "portfolio_id": portfolio.id, "portfolio_item_id": item.id},
        )
    logger.info(
        "portfolio item re-parented from %s",
        previous_portfolio_id,
        extra={"tenant_id": tenant_id, "portfolio_id": portfolio.id, "portfolio_item_id": item.id},
    )
    return item


def discard_portfolio(
    db: Session,
    *,
    tenant_id: str,
    portfolio_id: str,
    item_discarder: ItemDiscarder | None = None,
) -> CascadeOutcome:
    portfolio = get_portfolio(db, tenant_id=tenant_id, portfolio_id=portfolio_id)
    return discard_portfolio_cascade(db, portfolio, tenant_id=tenant_id, item_discarder=item_discarder)


def destroy_portfolio(db: Session, *, tenant_id: str, portfolio_id: str) -> None:
    portfolio = get_portfolio(db, tenant_id=tenant_id, portfolio_id=portfolio_id, include_discarded=True)
    db.delete(portfolio)
    db.commit()
    logger.info("portfolio destroyed", extra={"tenant_id": tenant_id, "portfolio_id": portfolio_id})


def _permitted(attributes: Mapping[str, Any]) -> dict[str, Any]:
    return {field: attributes[field] for field in PORTFOLIO_MUTABLE_FIELDS if field in attributes}


def _validate(
    db: Session,
    *,
    tenant_id: str,
    values: Mapping[str, Any],
    current: Portfolio | None = None,
) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}

    if current is None or "name" in values:
        name = values.get("name")
        if _is_blank(name):
            add_error(errors, "name", "can't be blank")
        elif len(str(name).strip()) > NAME_MAX_LENGTH:
            add_error(errors, "name", f"is too long (maximum is {NAME_MAX_LENGTH} characters)")
        elif _name_taken(db, tenant_id=tenant_id, name=str(name).strip(), exclude_id=current.id if current else None):
            add_error(errors, "name", "has already been taken")

    image_url = values.get("image_url")
    if not _is_blank(image_url):
        if len(str(image_url)) > IMAGE_URL_MAX_LENGTH:
            add_error(errors, "image_url", f"is too long (maximum is {IMAGE_URL_MAX_LENGTH} characters)")
        if not _is_valid_uri(str(image_url)):
            add_error(errors, "image_url", "is invalid")

    enabled = values.get("enabled")
    if not _is_blank(enabled) and not isinstance(enabled, bool) and not _BOOLEAN_LITERAL.match(str(enabled)):
        add_error(errors, "enabled", "is invalid")

    return errors


def _typecast(values: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(values)
    if "name" in result:
        result["name"] = str(result["name"]).strip()
    if "image_url" in result and _is_blank(result["image_url"]):
        result["image_url"] = None
    if "enabled" in result:
        enabled = result["enabled"]
        if isinstance(enabled, bool):
            pass
        elif _is_blank(enabled):
            result["enabled"] = False
        else:
            result["enabled"] = str(enabled).lower() == "true"
    return result


def _name_taken(db: Session, *, tenant_id: str, name: str, exclude_id: str | None) -> bool:
    query = tenant_scoped(db, Portfolio, tenant_id=tenant_id).filter(Portfolio.name == name)
    if exclude_id is not None:
        query = query.filter(Portfolio.id != exclude_id)
    return query.first() is not None


def _commit_or_raise_name_taken(db: Session) -> None:
    # The partial unique index catches races the pre-check cannot see.
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError({"name": ["has already been taken"]}) from exc


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_valid_uri(value: str) -> bool:
    if any(char.isspace() for char in value):
        return False
    parsed = urlparse(value)
    if not parsed.scheme or not _URI_SCHEME.match(parsed.scheme):
        return False
    return bool(parsed.netloc or parsed.path)
