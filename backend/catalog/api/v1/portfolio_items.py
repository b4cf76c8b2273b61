from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from catalog.api.deps import get_tenant_id
from catalog.api.errors import not_found, topology_failure, unprocessable
from catalog.api.response import collection_envelope, envelope
from catalog.db.session import get_db
from catalog.providers.errors import TopologyError
from catalog.schemas.portfolio_item import PortfolioItemCreateIn, PortfolioItemOut, PortfolioItemPatchIn
from catalog.services import portfolio_item_service, topology_service
from catalog.services.errors import NotFoundError, ValidationError


router = APIRouter(prefix="/portfolio_items", tags=["portfolio_items"])


@router.get("")
def list_portfolio_items(
    request: Request,
    include_discarded: bool = False,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    rows = portfolio_item_service.list_portfolio_items(db, tenant_id=tenant_id, include_discarded=include_discarded)
    return collection_envelope(request, [_item_out(row) for row in rows])


@router.post("")
def create_portfolio_item(
    request: Request,
    body: PortfolioItemCreateIn,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    try:
        row = topology_service.add_to_portfolio_item(
            db,
            tenant_id=tenant_id,
            portfolio_id=body.portfolio_id,
            service_offering_ref=body.service_offering_ref,
        )
    except TopologyError as exc:
        raise topology_failure(exc, status.HTTP_404_NOT_FOUND) from exc
    except NotFoundError as exc:
        raise not_found(exc) from exc
    except ValidationError as exc:
        raise unprocessable(exc) from exc
    return envelope(request, _item_out(row))


@router.get("/{portfolio_item_id}")
def show_portfolio_item(
    request: Request,
    portfolio_item_id: str,
    include_discarded: bool = False,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    try:
        row = portfolio_item_service.get_portfolio_item(
            db,
            tenant_id=tenant_id,
            portfolio_item_id=portfolio_item_id,
            include_discarded=include_discarded,
        )
    except NotFoundError as exc:
        raise not_found(exc) from exc
    return envelope(request, _item_out(row))


@router.patch("/{portfolio_item_id}")
def patch_portfolio_item(
    request: Request,
    portfolio_item_id: str,
    body: PortfolioItemPatchIn,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    try:
        row = portfolio_item_service.update_portfolio_item(
            db,
            tenant_id=tenant_id,
            portfolio_item_id=portfolio_item_id,
            patch=body.model_dump(exclude_unset=True),
        )
    except NotFoundError as exc:
        raise not_found(exc) from exc
    return envelope(request, _item_out(row))


@router.delete("/{portfolio_item_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard_portfolio_item(
    portfolio_item_id: str,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> Response:
    try:
        portfolio_item_service.discard_portfolio_item(db, tenant_id=tenant_id, portfolio_item_id=portfolio_item_id)
    except NotFoundError as exc:
        raise not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{portfolio_item_id}/service_plans")
def list_service_plans(
    request: Request,
    portfolio_item_id: str,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    try:
        item = portfolio_item_service.get_portfolio_item(db, tenant_id=tenant_id, portfolio_item_id=portfolio_item_id)
        plans = topology_service.fetch_service_plans(item)
    except NotFoundError as exc:
        raise not_found(exc) from exc
    except TopologyError as exc:
        raise topology_failure(exc, status.HTTP_500_INTERNAL_SERVER_ERROR) from exc
    return collection_envelope(request, plans)


@router.get("/{portfolio_item_id}/provider_control_parameters")
def show_provider_control_parameters(
    request: Request,
    portfolio_item_id: str,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> dict:
    try:
        item = portfolio_item_service.get_portfolio_item(db, tenant_id=tenant_id, portfolio_item_id=portfolio_item_id)
        parameters = topology_service.fetch_provider_control_parameters(item)
    except NotFoundError as exc:
        raise not_found(exc) from exc
    except TopologyError as exc:
        raise topology_failure(exc, status.HTTP_500_INTERNAL_SERVER_ERROR) from exc
    return envelope(request, parameters)


def _item_out(row) -> dict:
    return PortfolioItemOut.model_validate(row).model_dump(mode="json")
