"""SQLAlchemy repository implementations."""

from .base import BaseSQLRepository, CascadeRelation, DeactivationRestriction, HardDeleteRule
from .customer_repository import (
    AddressRepository,
    ContactRepository,
    CustomerRepository,
    InvoiceRepository,
)
from .product_repository import ProductRepository
from .role_repository import PermissionRepository, RolePermissionRepository, RoleRepository
from .user_repository import UserRepository

__all__ = [
    "AddressRepository",
    "BaseSQLRepository",
    "CascadeRelation",
    "ContactRepository",
    "CustomerRepository",
    "DeactivationRestriction",
    "HardDeleteRule",
    "InvoiceRepository",
    "PermissionRepository",
    "ProductRepository",
    "RolePermissionRepository",
    "RoleRepository",
    "UserRepository",
]
