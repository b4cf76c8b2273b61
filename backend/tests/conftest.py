import os
os.environ["APP_ENV"] = "test"

# THEN import anything else
import shutil
import tempfile
import time
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Generator

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

import catalog.db.session as db_session_module
from catalog.core.config import get_settings
from catalog.core.security import create_token
from catalog.db.session import get_db
from catalog.models.portfolio import Portfolio
from catalog.models.portfolio_item import PortfolioItem
from catalog.models.tenant import Tenant


TENANT_A_EXTERNAL = "0000001"
TENANT_B_EXTERNAL = "0000002"


def _run_alembic_upgrade(backend_dir: Path, database_url: str) -> None:
    cfg = Config(str(backend_dir / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    cfg.attributes["connection_url"] = database_url
    cfg.attributes["configure_logger"] = False
    command.upgrade(cfg, "head")


@pytest.fixture(scope="session", autouse=True)
def apply_migrations() -> Generator[Path, None, None]:
    backend_dir = Path(__file__).resolve().parents[1]
    temp_dir = Path(tempfile.mkdtemp(prefix="pytest-catalog-db-"))
    template_db_path = temp_dir / f"template-{uuid.uuid4().hex}.sqlite3"
    database_url = f"sqlite:///{template_db_path.as_posix()}"
    os.environ["DATABASE_URL"] = database_url
    os.environ["POSTGRES_DSN"] = database_url
    get_settings.cache_clear()
    db_session_module.reset_engine_state()

    _run_alembic_upgrade(backend_dir, database_url)
    verification_engine = create_engine(database_url, poolclass=NullPool)
    try:
        tables = set(inspect(verification_engine).get_table_names())
    finally:
        verification_engine.dispose()
    missing = {"tenants", "portfolios", "portfolio_items"} - tables
    if missing:
        raise RuntimeError(f"Alembic migration parity check failed; missing tables: {sorted(missing)}")
    yield template_db_path
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture()
def db_session(apply_migrations: Path) -> Generator[Session, None, None]:
    test_db_path = apply_migrations.parent / f"{uuid.uuid4().hex}.sqlite3"
    shutil.copy2(apply_migrations, test_db_path)
    engine = create_engine(
        f"sqlite:///{test_db_path.as_posix()}",
        connect_args={"check_same_thread": False, "timeout": 30},
        poolclass=NullPool,
    )
    test_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    db_session_module.bind_session_factory(test_session_local)
    test_session = test_session_local()

    test_session.add_all(
        [
            Tenant(id=str(uuid.uuid4()), external_tenant=TENANT_A_EXTERNAL, name="Tenant A", created_at=datetime.now(UTC)),
            Tenant(id=str(uuid.uuid4()), external_tenant=TENANT_B_EXTERNAL, name="Tenant B", created_at=datetime.now(UTC)),
        ]
    )
    test_session.commit()
    yield test_session
    test_session.close()
    engine.dispose()
    db_session_module.reset_engine_state()
    for _ in range(5):
        try:
            test_db_path.unlink(missing_ok=True)
            break
        except PermissionError:
            time.sleep(0.05)


@pytest.fixture()
def tenant_a(db_session: Session) -> Tenant:
    return db_session.query(Tenant).filter(Tenant.external_tenant == TENANT_A_EXTERNAL).one()


@pytest.fixture()
def tenant_b(db_session: Session) -> Tenant:
    return db_session.query(Tenant).filter(Tenant.external_tenant == TENANT_B_EXTERNAL).one()


@pytest.fixture()
def headers_a(tenant_a: Tenant) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token(tenant_id=tenant_a.id)}"}


@pytest.fixture()
def headers_b(tenant_b: Tenant) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_token(tenant_id=tenant_b.id)}"}


@pytest.fixture()
def make_portfolio(db_session: Session):
    def _make(tenant: Tenant, name: str = "Portfolio", **attributes) -> Portfolio:
        row = Portfolio(tenant_id=tenant.id, name=name, **attributes)
        db_session.add(row)
        db_session.commit()
        db_session.refresh(row)
        return row

    return _make


@pytest.fixture()
def make_portfolio_item(db_session: Session):
    def _make(portfolio: Portfolio, service_offering_ref: str = "998", **attributes) -> PortfolioItem:
        attributes.setdefault("service_offering_source_ref", "568")
        row = PortfolioItem(
            tenant_id=portfolio.tenant_id,
            portfolio_id=portfolio.id,
            service_offering_ref=service_offering_ref,
            **attributes,
        )
        db_session.add(row)
        db_session.commit()
        db_session.refresh(row)
        return row

    return _make


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    from catalog.main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
