from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PortfolioItemCreateIn(BaseModel):
    portfolio_id: str = Field(..., min_length=1)
    service_offering_ref: str = Field(..., min_length=1, max_length=64)


class PortfolioItemAddIn(BaseModel):
    portfolio_item_id: str = Field(..., min_length=1)


class PortfolioItemPatchIn(BaseModel):
    # Extra keys pass through so the service can drop read-only fields itself.
    model_config = ConfigDict(extra="allow")

    name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    long_description: str | None = None
    distributor: str | None = Field(default=None, max_length=255)
    documentation_url: str | None = Field(default=None, max_length=2048)
    support_url: str | None = Field(default=None, max_length=2048)
    workflow_ref: str | None = Field(default=None, max_length=255)


class PortfolioItemOut(BaseModel):
    id: str
    tenant_id: str
    portfolio_id: str
    service_offering_ref: str
    service_offering_source_ref: str | None
    name: str | None
    description: str | None
    long_description: str | None
    distributor: str | None
    documentation_url: str | None
    support_url: str | None
    workflow_ref: str | None
    discarded_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
