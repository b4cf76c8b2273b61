from __future__ import annotations

from typing import TypeVar

from sqlalchemy.orm import Query, Session

from catalog.models.mixins import SoftDeleteMixin


ModelT = TypeVar("ModelT", bound=SoftDeleteMixin)


def tenant_scoped(db: Session, model: type[ModelT], *, tenant_id: str, include_discarded: bool = False) -> Query:
    """Base query for ``model`` bound to one tenant, kept rows only unless asked otherwise."""
    query = db.query(model).filter(model.tenant_id == tenant_id)
    if not include_discarded:
        query = query.filter(model.kept_clause())
    return query
