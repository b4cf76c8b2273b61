from catalog.models.mixins import DiscardState, SoftDeleteMixin
from catalog.models.portfolio import Portfolio
from catalog.models.portfolio_item import PortfolioItem
from catalog.models.tenant import Tenant

__all__ = [
    'DiscardState',
    'SoftDeleteMixin',
    'Tenant',
    'Portfolio',
    'PortfolioItem',
]
