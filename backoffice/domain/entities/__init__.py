"""Domain entities mapped to database tables."""

from .base import BaseEntity
from .customer import Address, Contact, Customer, Invoice, InvoiceStatus
from .product import Product
from .role import Permission, Role, RolePermission
from .user import User

__all__ = [
    "Address",
    "BaseEntity",
    "Contact",
    "Customer",
    "Invoice",
    "InvoiceStatus",
    "Permission",
    "Product",
    "Role",
    "RolePermission",
    "User",
]
