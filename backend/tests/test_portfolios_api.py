from catalog.core.security import create_token
from catalog.models.portfolio import Portfolio
from catalog.models.portfolio_item import PortfolioItem


def test_create_and_show_portfolio(client, headers_a, tenant_a):
    created = client.post(
        "/api/v1/portfolios",
        json={"name": "Demo", "description": "demo portfolio", "image_url": "https://example.com/a.png", "enabled": "true"},
        headers=headers_a,
    )
    assert created.status_code == 200
    data = created.json()["data"]
    assert data["name"] == "Demo"
    assert data["enabled"] is True
    assert data["tenant_id"] == tenant_a.id
    assert created.json()["meta"]["tenant_id"] == tenant_a.id

    shown = client.get(f"/api/v1/portfolios/{data['id']}", headers=headers_a)
    assert shown.status_code == 200
    assert shown.json()["data"]["id"] == data["id"]


def test_create_portfolio_returns_every_field_error(client, headers_a):
    response = client.post(
        "/api/v1/portfolios",
        json={"image_url": "bad uri", "enabled": "maybe"},
        headers=headers_a,
    )
    assert response.status_code == 422
    details = response.json()["errors"][0]["details"]
    assert details["errors"] == {
        "name": ["can't be blank"],
        "image_url": ["is invalid"],
        "enabled": ["is invalid"],
    }


def test_numeric_enabled_is_invalid(client, headers_a):
    response = client.post("/api/v1/portfolios", json={"name": "Num", "enabled": 1}, headers=headers_a)
    assert response.status_code == 422
    assert response.json()["errors"][0]["details"]["errors"] == {"enabled": ["is invalid"]}


def test_overlong_name_is_reported_with_other_field_errors(client, headers_a):
    response = client.post(
        "/api/v1/portfolios",
        json={"name": "n" * 256, "image_url": "bad uri"},
        headers=headers_a,
    )
    assert response.status_code == 422
    assert response.json()["errors"][0]["details"]["errors"] == {
        "name": ["is too long (maximum is 255 characters)"],
        "image_url": ["is invalid"],
    }


def test_duplicate_portfolio_name_is_unprocessable(client, headers_a, headers_b):
    assert client.post("/api/v1/portfolios", json={"name": "Dup"}, headers=headers_a).status_code == 200
    duplicate = client.post("/api/v1/portfolios", json={"name": "Dup"}, headers=headers_a)
    assert duplicate.status_code == 422
    assert duplicate.json()["errors"][0]["details"]["errors"] == {"name": ["has already been taken"]}

    other_tenant = client.post("/api/v1/portfolios", json={"name": "Dup"}, headers=headers_b)
    assert other_tenant.status_code == 200


def test_tenant_cannot_see_other_tenant_portfolios(client, headers_a, headers_b, tenant_a, make_portfolio):
    portfolio = make_portfolio(tenant_a, "A only")

    assert client.get(f"/api/v1/portfolios/{portfolio.id}", headers=headers_b).status_code == 404
    assert client.get("/api/v1/portfolios", headers=headers_b).json()["meta"]["count"] == 0
    assert client.get("/api/v1/portfolios", headers=headers_a).json()["meta"]["count"] == 1
    assert client.delete(f"/api/v1/portfolios/{portfolio.id}", headers=headers_b).status_code == 404


def test_unknown_tenant_token_is_rejected(client):
    headers = {"Authorization": f"Bearer {create_token(tenant_id='no-such-tenant')}"}
    assert client.get("/api/v1/portfolios", headers=headers).status_code == 401


def test_invalid_token_is_rejected(client):
    assert client.get("/api/v1/portfolios", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_patch_portfolio(client, headers_a, tenant_a, make_portfolio):
    portfolio = make_portfolio(tenant_a, "Before")
    response = client.patch(
        f"/api/v1/portfolios/{portfolio.id}",
        json={"name": "After", "enabled": False},
        headers=headers_a,
    )
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "After"
    assert response.json()["data"]["enabled"] is False

    invalid = client.patch(f"/api/v1/portfolios/{portfolio.id}", json={"image_url": "nope nope"}, headers=headers_a)
    assert invalid.status_code == 422


def test_discard_portfolio_cascades(client, headers_a, db_session, tenant_a, make_portfolio, make_portfolio_item):
    portfolio = make_portfolio(tenant_a)
    items = [make_portfolio_item(portfolio), make_portfolio_item(portfolio)]

    response = client.delete(f"/api/v1/portfolios/{portfolio.id}", headers=headers_a)
    assert response.status_code == 204

    db_session.expire_all()
    assert db_session.get(Portfolio, portfolio.id).discarded_at is not None
    assert all(db_session.get(PortfolioItem, item.id).discarded_at is not None for item in items)

    assert client.get("/api/v1/portfolios", headers=headers_a).json()["meta"]["count"] == 0
    listed = client.get("/api/v1/portfolios?include_discarded=true", headers=headers_a).json()
    assert listed["meta"]["count"] == 1
    assert listed["data"][0]["discarded_at"] is not None


def test_discard_portfolio_aborts_when_item_fails(
    client, headers_a, db_session, tenant_a, make_portfolio, make_portfolio_item, monkeypatch
):
    portfolio = make_portfolio(tenant_a)
    item = make_portfolio_item(portfolio, name="pinned")
    monkeypatch.setattr("catalog.services.discard_service.discard_item", lambda _db, _item, _at: False)

    response = client.delete(f"/api/v1/portfolios/{portfolio.id}", headers=headers_a)

    assert response.status_code == 422
    details = response.json()["errors"][0]["details"]
    assert details["errors"] == {item.id: [f"item pinned (id {item.id}) failed to be discarded."]}
    db_session.expire_all()
    assert db_session.get(Portfolio, portfolio.id).discarded_at is None
    assert db_session.get(PortfolioItem, item.id).discarded_at is None


def test_discard_missing_portfolio(client, headers_a):
    response = client.delete("/api/v1/portfolios/missing", headers=headers_a)
    assert response.status_code == 404


def test_health_endpoint(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "ok"
    assert response.headers["X-Request-ID"]


def test_readiness_endpoint(client):
    response = client.get("/api/v1/health/readiness")
    assert response.status_code == 200
    assert response.json()["data"] == {"status": "ready", "dependencies": {"database": True}}
