"""
SQLAlchemy models package
"""
from .users import Users
from .books import Books
from .pages import Pages
from .images import Images
from .print_orders import PrintOrders

__all__ = [
    "Users",
    "Books",
    "Pages",
    "Images",
    "PrintOrders",
]
