from .storage import StoredCollection
from .auth import Role, User
from .customers import Client, WALK_IN_CLIENT_ID
from .inventory import Product, Provider, Purchase, PurchaseItem
from .sales import PaymentMethod, Sale, SaleItem

__all__ = [
    'StoredCollection',
    'Role', 'User',
    'Client', 'WALK_IN_CLIENT_ID',
    'Product', 'Provider', 'Purchase', 'PurchaseItem',
    'PaymentMethod', 'Sale', 'SaleItem',
]
