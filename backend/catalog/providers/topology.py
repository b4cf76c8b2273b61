from __future__ import annotations

import logging
from typing import Any

import httpx

from catalog.core.config import get_settings
from catalog.core.metrics import topology_requests_total
from catalog.providers.errors import TopologyError, to_topology_error


logger = logging.getLogger("catalog.topology")


class TopologyClient:
    """Thin client for the topological inventory service."""

    def __init__(self, *, base_url: str | None = None, timeout_seconds: float | None = None) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.topology_base_url).rstrip("/")
        self._timeout_seconds = float(timeout_seconds or settings.topology_timeout_seconds)
        self._headers: dict[str, str] = {"Accept": "application/json"}
        if settings.topology_auth_header and settings.topology_auth_token:
            self._headers[settings.topology_auth_header] = settings.topology_auth_token

    def get_service_offering(self, service_offering_ref: str) -> dict[str, Any]:
        body = self._get("show_service_offering", f"/service_offerings/{service_offering_ref}")
        if not isinstance(body, dict):
            raise TopologyError("Topology service offering response must be a JSON object.", reason_code="response_invalid")
        return body

    def list_service_plans(self, service_offering_ref: str) -> list[dict[str, Any]]:
        body = self._get("list_service_offering_service_plans", f"/service_offerings/{service_offering_ref}/service_plans")
        return _collection_data(body)

    def list_container_projects(self, source_ref: str) -> list[dict[str, Any]]:
        body = self._get("list_source_container_projects", f"/sources/{source_ref}/container_projects")
        return _collection_data(body)

    def _get(self, operation: str, path: str) -> Any:
        url = f"{self._base_url}{path}"
        try:
            with httpx.Client() as client:
                response = client.get(url, headers=self._headers, timeout=self._timeout_seconds)
            response.raise_for_status()
            body = response.json()
        except ValueError as exc:
            topology_requests_total.labels(operation=operation, outcome="error").inc()
            raise TopologyError(
                f"Topology {operation} response is not valid JSON.",
                reason_code="response_invalid",
            ) from exc
        except httpx.HTTPError as exc:
            topology_requests_total.labels(operation=operation, outcome="error").inc()
            error = to_topology_error(exc, f"Topology {operation} request failed.")
            logger.warning(
                "topology request failed: %s (%s)",
                operation,
                error.reason_code,
                extra={"status_code": error.status_code},
            )
            raise error from exc
        topology_requests_total.labels(operation=operation, outcome="success").inc()
        return body


def _collection_data(body: Any) -> list[dict[str, Any]]:
    if isinstance(body, dict):
        body = body.get("data", [])
    if not isinstance(body, list):
        raise TopologyError("Topology collection response must contain a data list.", reason_code="response_invalid")
    return [row for row in body if isinstance(row, dict)]
