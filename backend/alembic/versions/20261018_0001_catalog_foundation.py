"""catalog foundation: tenants, portfolios, portfolio items

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""
from alembic import op
import sqlalchemy as sa


revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("external_tenant", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "portfolios",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("discarded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("tenant_id", "name", "discarded_at", name="uq_portfolios_tenant_name_discarded_at"),
    )
    op.create_index("ix_portfolios_tenant_id", "portfolios", ["tenant_id"])
    op.create_index("ix_portfolios_discarded_at", "portfolios", ["discarded_at"])
    op.create_index(
        "uq_portfolios_tenant_name_kept",
        "portfolios",
        ["tenant_id", "name"],
        unique=True,
        sqlite_where=sa.text("discarded_at IS NULL"),
        postgresql_where=sa.text("discarded_at IS NULL"),
    )
    op.create_table(
        "portfolio_items",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "portfolio_id",
            sa.String(length=36),
            sa.ForeignKey("portfolios.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("service_offering_ref", sa.String(length=64), nullable=False),
        sa.Column("service_offering_source_ref", sa.String(length=64), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("long_description", sa.Text(), nullable=True),
        sa.Column("distributor", sa.String(length=255), nullable=True),
        sa.Column("documentation_url", sa.String(length=2048), nullable=True),
        sa.Column("support_url", sa.String(length=2048), nullable=True),
        sa.Column("workflow_ref", sa.String(length=255), nullable=True),
        sa.Column("discarded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_portfolio_items_tenant_id", "portfolio_items", ["tenant_id"])
    op.create_index("ix_portfolio_items_portfolio_id", "portfolio_items", ["portfolio_id"])
    op.create_index("ix_portfolio_items_discarded_at", "portfolio_items", ["discarded_at"])
    op.create_index("ix_portfolio_items_tenant_offering", "portfolio_items", ["tenant_id", "service_offering_ref"])


def downgrade() -> None:
    op.drop_index("ix_portfolio_items_tenant_offering", table_name="portfolio_items")
    op.drop_index("ix_portfolio_items_discarded_at", table_name="portfolio_items")
    op.drop_index("ix_portfolio_items_portfolio_id", table_name="portfolio_items")
    op.drop_index("ix_portfolio_items_tenant_id", table_name="portfolio_items")
    op.drop_table("portfolio_items")
    op.drop_index("uq_portfolios_tenant_name_kept", table_name="portfolios")
    op.drop_index("ix_portfolios_discarded_at", table_name="portfolios")
    op.drop_index("ix_portfolios_tenant_id", table_name="portfolios")
    op.drop_table("portfolios")
    op.drop_table("tenants")
