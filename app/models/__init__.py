# Importing this package registers every mapped class on Base.metadata.
from app.models.user import User
from app.models.quote import Quote
from app.models.order import Order
from app.models.review import Review
from app.models.inquiry import Inquiry
from app.models.installation import Installation
from app.models.product import Product

__all__ = [
    "User",
    "Quote",
    "Order",
    "Review",
    "Inquiry",
    "Installation",
    "Product",
]
