from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from catalog.api.deps import get_tenant_id
from catalog.api.errors import not_found, unprocessable
from catalog.api.response import collection_envelope, envelope
from catalog.db.session import get_db
from catalog.schemas.portfolio import PortfolioCreateIn, PortfolioOut, PortfolioPatchIn
from catalog.schemas.portfolio_item import PortfolioItemAddIn, PortfolioItemOut
from catalog.services import portfolio_service
from catalog.services.errors import NotFoundError, ValidationError


router = APIRouter(prefix="/portfolios", tags=["portfolios"])


@router.get("")
def list_portfolios(
    request: Request,
    include_discarded: bool = False,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    rows = portfolio_service.list_portfolios(db, tenant_id=tenant_id, include_discarded=include_discarded)
    return collection_envelope(request, [_portfolio_out(row) for row in rows])


@router.post("")
def create_portfolio(
    request: Request,
    body: PortfolioCreateIn,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    try:
        row = portfolio_service.create_portfolio(db, tenant_id=tenant_id, attributes=body.model_dump(exclude_unset=True))
    except ValidationError as exc:
        raise unprocessable(exc) from exc
    return envelope(request, _portfolio_out(row))


@router.get("/{portfolio_id}")
def show_portfolio(
    request: Request,
    portfolio_id: str,
    include_discarded: bool = False,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    try:
        row = portfolio_service.get_portfolio(
            db,
            tenant_id=tenant_id,
            portfolio_id=portfolio_id,
            include_discarded=include_discarded,
        )
    except NotFoundError as exc:
        raise not_found(exc) from exc
    return envelope(request, _portfolio_out(row))


@router.patch("/{portfolio_id}")
def patch_portfolio(
    request: Request,
    portfolio_id: str,
    body: PortfolioPatchIn,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    try:
        row = portfolio_service.update_portfolio(
            db,
            tenant_id=tenant_id,
            portfolio_id=portfolio_id,
            patch=body.model_dump(exclude_unset=True),
        )
    except NotFoundError as exc:
        raise not_found(exc) from exc
    except ValidationError as exc:
        raise unprocessable(exc) from exc
    return envelope(request, _portfolio_out(row))


@router.delete("/{portfolio_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard_portfolio(
    portfolio_id: str,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> Response:
    try:
        portfolio_service.discard_portfolio(db, tenant_id=tenant_id, portfolio_id=portfolio_id)
    except NotFoundError as exc:
        raise not_found(exc) from exc
    except ValidationError as exc:
        raise unprocessable(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{portfolio_id}/portfolio_items")
def list_portfolio_items(
    request: Request,
    portfolio_id: str,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    try:
        rows = portfolio_service.list_portfolio_items(db, tenant_id=tenant_id, portfolio_id=portfolio_id)
    except NotFoundError as exc:
        raise not_found(exc) from exc
    return collection_envelope(request, [PortfolioItemOut.model_validate(row).model_dump(mode="json") for row in rows])


@router.post("/{portfolio_id}/portfolio_items")
def add_portfolio_item(
    request: Request,
    portfolio_id: str,
    body: PortfolioItemAddIn,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    try:
        item = portfolio_service.add_portfolio_item(
            db,
            tenant_id=tenant_id,
            portfolio_id=portfolio_id,
            portfolio_item_id=body.portfolio_item_id,
        )
    except NotFoundError as exc:
        raise not_found(exc) from exc
    return envelope(request, [PortfolioItemOut.model_validate(item).model_dump(mode="json")])


def _portfolio_out(row) -> dict:
    return PortfolioOut.model_validate(row).model_dump(mode="json")
