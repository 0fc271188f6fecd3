"""
Models package — export all SQLAlchemy models.
"""

from market_watch.models.base import Base
from market_watch.models.condition import Condition
from market_watch.models.detail import Detail
from market_watch.models.group import Group
from market_watch.models.language import Language
from market_watch.models.printing import Printing
from market_watch.models.product import Product
from market_watch.models.rarity import Rarity
from market_watch.models.sku import SKU
from market_watch.models.sku_price import SKUPrice

__all__ = [
    "Base",
    "Condition",
    "Detail",
    "Group",
    "Language",
    "Printing",
    "Product",
    "Rarity",
    "SKU",
    "SKUPrice",
]
