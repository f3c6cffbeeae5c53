from money_manager.db.models.holding import Holding
from money_manager.db.models.item import Item
from money_manager.db.models.item_price import ItemPrice
from money_manager.db.models.user import User
from money_manager.db.models.valuation import Valuation

__all__ = ["User", "Item", "ItemPrice", "Holding", "Valuation"]
