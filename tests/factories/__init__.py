"""Factories for generating fake domain entities in tests."""

from .entities import (
    create_fake_address,
    create_fake_contact,
    create_fake_customer,
    create_fake_invoice,
    create_fake_permission,
    create_fake_product,
    create_fake_role,
    create_fake_user,
)

__all__ = [
    "create_fake_address",
    "create_fake_contact",
    "create_fake_customer",
    "create_fake_invoice",
    "create_fake_permission",
    "create_fake_product",
    "create_fake_role",
    "create_fake_user",
]
