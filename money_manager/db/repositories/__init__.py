# Repository pattern: all data access lives behind these classes

from money_manager.db.repositories.holding_repository import HoldingRepository
from money_manager.db.repositories.item_repository import ItemRepository
from money_manager.db.repositories.user_repository import UserRepository

__all__ = ["UserRepository", "ItemRepository", "HoldingRepository"]
