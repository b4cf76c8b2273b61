import json
import logging

from prometheus_client import REGISTRY

from catalog.core.logging_config import JsonFormatter
from catalog.services import portfolio_service
from catalog.services.discard_service import CascadeAbortedError


def _discard_count(outcome: str) -> float:
    return REGISTRY.get_sample_value("portfolio_discard_total", {"outcome": outcome}) or 0.0


def test_json_formatter_includes_cascade_fields() -> None:
    record = logging.LogRecord("catalog.discard", logging.ERROR, __file__, 1, "discard aborted", None, None)
    record.tenant_id = "tenant-1"
    record.portfolio_id = "portfolio-1"
    record.failed_item_ids = ["item-1"]

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "ERROR"
    assert payload["tenant_id"] == "tenant-1"
    assert payload["portfolio_id"] == "portfolio-1"
    assert payload["failed_item_ids"] == ["item-1"]
    assert "method" not in payload


def test_cascade_outcomes_are_counted_and_logged(db_session, tenant_a, make_portfolio, make_portfolio_item, caplog) -> None:
    discarded_before = _discard_count("discarded")
    aborted_before = _discard_count("discard_aborted")
    stubborn = make_portfolio(tenant_a, "Stubborn")
    make_portfolio_item(stubborn)
    easy = make_portfolio(tenant_a, "Easy")

    with caplog.at_level(logging.INFO, logger="catalog.discard"):
        try:
            portfolio_service.discard_portfolio(
                db_session,
                tenant_id=tenant_a.id,
                portfolio_id=stubborn.id,
                item_discarder=lambda _db, _item, _at: False,
            )
        except CascadeAbortedError:
            pass
        portfolio_service.discard_portfolio(db_session, tenant_id=tenant_a.id, portfolio_id=easy.id)

    assert _discard_count("discard_aborted") == aborted_before + 1
    assert _discard_count("discarded") == discarded_before + 1
    messages = [record.getMessage() for record in caplog.records]
    assert any("not discarding portfolio" in message for message in messages)
    assert "portfolio discarded" in messages


def test_request_size_limit(client, headers_a) -> None:
    from catalog.core.config import get_settings

    oversized = "x" * (get_settings().max_request_body_bytes + 1)
    response = client.post("/api/v1/portfolios", content=oversized, headers={**headers_a, "content-type": "application/json"})
    assert response.status_code == 413


def test_request_log_carries_tenant_and_portfolio(client, headers_a, tenant_a, make_portfolio, caplog) -> None:
    portfolio = make_portfolio(tenant_a)

    with caplog.at_level(logging.INFO, logger="catalog.api"):
        response = client.get(f"/api/v1/portfolios/{portfolio.id}", headers=headers_a)

    assert response.status_code == 200
    records = [record for record in caplog.records if record.getMessage() == "http.request"]
    assert records
    assert records[-1].tenant_id == tenant_a.id
    assert records[-1].portfolio_id == portfolio.id
    assert records[-1].request_id == response.headers["X-Request-ID"]
