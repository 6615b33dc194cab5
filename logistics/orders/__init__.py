from .models import Order, OrderKind, order_from_row
from .repository import OrderStore

__all__ = ["Order", "OrderKind", "order_from_row", "OrderStore"]
