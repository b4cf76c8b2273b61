import os
import sys
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Catalog API"
    app_env: str = "local"
    api_v1_prefix: str = "/api/v1"

    jwt_secret: str = "local-dev-secret"
    jwt_algorithm: str = "HS256"
    jwt_access_ttl_seconds: int = 900

    postgres_dsn: str = "sqlite:///./catalog.db"

    topology_base_url: str = "http://localhost:8081/api/topological-inventory/v1.0"
    topology_timeout_seconds: float = 15.0
    topology_auth_header: str = ""
    topology_auth_token: str = ""

    catalog_strict_reparent_tenant: bool = False

    log_level: str = "INFO"
    metrics_enabled: bool = False
    max_request_body_bytes: int = 2_000_000

    @model_validator(mode="after")
    def validate_production_guardrails(self) -> "Settings":
        if not self.jwt_secret.strip():
            raise ValueError("JWT_SECRET is required and must not be empty.")

        if self.app_env.lower() != "production":
            return self

        if self.jwt_secret in {"local-dev-secret", "replace-me"} or len(self.jwt_secret) < 32:
            raise ValueError("Production requires JWT_SECRET with at least 32 characters.")
        if self.postgres_dsn.startswith("sqlite"):
            raise ValueError("Production requires POSTGRES_DSN backed by PostgreSQL.")

        parsed_topology = urlparse(self.topology_base_url)
        host = (parsed_topology.hostname or "").lower()
        if not parsed_topology.scheme or not host:
            raise ValueError("Production requires TOPOLOGY_BASE_URL to be an absolute URL.")
        if host in {"localhost", "127.0.0.1", "::1"}:
            raise ValueError("Production forbids a localhost TOPOLOGY_BASE_URL.")
        return self


@lru_cache
def get_settings() -> Settings:
    app_env = os.getenv("APP_ENV", "").lower()
    is_pytest_runtime = "pytest" in sys.modules
    if app_env == "test" or (not app_env and is_pytest_runtime):
        def _env_or_default(name: str, default: str) -> str:
            value = os.getenv(name)
            if value is None:
                return default
            stripped = value.strip()
            return stripped if stripped else default

        return Settings(
            app_env="test",
            jwt_secret=_env_or_default("JWT_SECRET", "test-secret-key"),
            postgres_dsn=_env_or_default("POSTGRES_DSN", "sqlite:///./catalog-test.db"),
            topology_base_url=_env_or_default("TOPOLOGY_BASE_URL", "http://topology.test/api/topological-inventory/v1.0"),
        )
    return Settings()
