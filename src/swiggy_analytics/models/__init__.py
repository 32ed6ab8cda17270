from .user import User
from .restaurant import Restaurant
from .food import Food
from .order import Order
from .order_detail import OrderDetail

__all__ = [
    "User",
    "Restaurant",
    "Food",
    "Order",
    "OrderDetail",
]
