import pytest

from catalog.core import config as config_module
from catalog.core.config import Settings


def test_get_settings_in_test_mode_without_jwt_secret(monkeypatch) -> None:
    config_module.get_settings.cache_clear()
    try:
        monkeypatch.setenv("APP_ENV", "test")
        monkeypatch.delenv("JWT_SECRET", raising=False)

        settings = config_module.get_settings()

        assert settings.app_env == "test"
        assert settings.jwt_secret == "test-secret-key"
        assert settings.catalog_strict_reparent_tenant is False
    finally:
        config_module.get_settings.cache_clear()


def test_production_rejects_default_jwt_secret() -> None:
    with pytest.raises(ValueError, match="JWT_SECRET"):
        Settings(app_env="production", postgres_dsn="postgresql://db/catalog")


def test_production_rejects_sqlite() -> None:
    with pytest.raises(ValueError, match="PostgreSQL"):
        Settings(app_env="production", jwt_secret="x" * 40, postgres_dsn="sqlite:///./catalog.db")


def test_production_rejects_localhost_topology() -> None:
    with pytest.raises(ValueError, match="TOPOLOGY_BASE_URL"):
        Settings(
            app_env="production",
            jwt_secret="x" * 40,
            postgres_dsn="postgresql://db/catalog",
            topology_base_url="http://localhost:8081/api",
        )


def test_production_accepts_complete_configuration() -> None:
    settings = Settings(
        app_env="production",
        jwt_secret="x" * 40,
        postgres_dsn="postgresql://db/catalog",
        topology_base_url="https://topology.internal/api/topological-inventory/v1.0",
    )
    assert settings.app_env == "production"
