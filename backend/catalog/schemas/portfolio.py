from datetime import datetime
from typing import Any

from pydantic import BaseModel


class PortfolioCreateIn(BaseModel):
    name: str | None = None
    description: str | None = None
    image_url: str | None = None
    # Raw value so "TRUE"/"false" literals and stray numbers reach validation untouched.
    enabled: Any = None


class PortfolioPatchIn(BaseModel):
    name: str | None = None
    description: str | None = None
    image_url: str | None = None
    enabled: Any = None


class PortfolioOut(BaseModel):
    id: str
    tenant_id: str
    name: str
    description: str | None
    image_url: str | None
    enabled: bool
    discarded_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
