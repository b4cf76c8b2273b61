from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from catalog.models.portfolio_item import PortfolioItem
from catalog.providers.topology import TopologyClient
from catalog.services.portfolio_item_service import create_portfolio_item


logger = logging.getLogger("catalog.topology")

# topology service offering attribute -> portfolio item column
_OFFERING_FIELD_MAP = {
    "name": "name",
    "description": "description",
    "long_description": "long_description",
    "distributor": "distributor",
    "documentation_url": "documentation_url",
    "support_url": "support_url",
    "source_id": "service_offering_source_ref",
}


def add_to_portfolio_item(
    db: Session,
    *,
    tenant_id: str,
    portfolio_id: str,
    service_offering_ref: str,
    client: TopologyClient | None = None,
) -> PortfolioItem:
    """Create a portfolio item from a topology service offering."""
    offering = (client or TopologyClient()).get_service_offering(service_offering_ref)
    attributes: dict[str, Any] = {"service_offering_ref": str(offering.get("id") or service_offering_ref)}
    for source_field, target_field in _OFFERING_FIELD_MAP.items():
        value = offering.get(source_field)
        if value is not None:
            attributes[target_field] = str(value)
    return create_portfolio_item(db, tenant_id=tenant_id, portfolio_id=portfolio_id, attributes=attributes)


def fetch_service_plans(item: PortfolioItem, *, client: TopologyClient | None = None) -> list[dict[str, Any]]:
    plans = (client or TopologyClient()).list_service_plans(item.service_offering_ref)
    return [
        {
            "service_offering_id": item.id,
            "service_plan_ref": str(plan.get("id", "")),
            "name": plan.get("name"),
            "description": plan.get("description"),
            "create_json_schema": plan.get("create_json_schema"),
        }
        for plan in plans
    ]


def fetch_provider_control_parameters(item: PortfolioItem, *, client: TopologyClient | None = None) -> dict[str, Any]:
    """JSON schema offering the source's container projects as target namespaces."""
    topology = client or TopologyClient()
    source_ref = item.service_offering_source_ref
    if not source_ref:
        source_ref = str(topology.get_service_offering(item.service_offering_ref).get("source_id", ""))
    projects = topology.list_container_projects(source_ref)
    namespaces = sorted({str(project["name"]) for project in projects if project.get("name")})
    return {
        "type": "object",
        "required": ["namespace"],
        "properties": {
            "namespace": {
                "type": "string",
                "title": "Namespace",
                "description": "The namespace the service will be provisioned into",
                "enum": namespaces,
            }
        },
    }
