from .user import User, UserRole, VerificationToken
from .material import Material
from .product import Product
from .purchase import Purchase, PurchaseItem, PurchaseAdditionalCost, PurchaseStatus
from .stock_history import StockHistory, MovementType

__all__ = [n for n in dir() if n[:1].isupper()]
