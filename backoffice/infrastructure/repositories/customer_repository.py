"""Repositories for the customer aggregate."""

from typing import List

from backoffice.domain.entities.customer import Address, Contact, Customer, Invoice, InvoiceStatus
from backoffice.infrastructure.repositories.base import (
    BaseSQLRepository,
    CascadeRelation,
    DeactivationRestriction,
    HardDeleteRule,
)


class CustomerRepository(BaseSQLRepository[Customer]):
    """Customers own contacts and addresses; invoices outlive them.

    Soft deletes may cascade to `contacts`, `addresses` and `invoices`.
    Hard deletes remove contacts and addresses and are refused while any
    invoice references the customer. Open invoices block deactivation
    unless the `invoices` restriction is skipped on a soft delete.
    """

    model = Customer
    relations = (
        CascadeRelation("contacts", Contact, "customer_id", HardDeleteRule.CASCADE),
        CascadeRelation("addresses", Address, "customer_id", HardDeleteRule.CASCADE),
        CascadeRelation("invoices", Invoice, "customer_id", HardDeleteRule.RESTRICT),
    )
    restrictions = (
        DeactivationRestriction(
            relation="invoices",
            model=Invoice,
            foreign_key="customer_id",
            message="Cannot deactivate a customer with open invoices",
            condition={"status": InvoiceStatus.OPEN, "is_active": True},
        ),
    )


class ContactRepository(BaseSQLRepository[Contact]):
    model = Contact

    async def find_by_customer(self, customer_id: str, include_inactive: bool = False) -> List[Contact]:
        return await self.find_many({"customer_id": customer_id}, include_inactive=include_inactive)


class AddressRepository(BaseSQLRepository[Address]):
    model = Address

    async def find_by_customer(self, customer_id: str, include_inactive: bool = False) -> List[Address]:
        return await self.find_many({"customer_id": customer_id}, include_inactive=include_inactive)


class InvoiceRepository(BaseSQLRepository[Invoice]):
    model = Invoice

    async def find_open_by_customer(self, customer_id: str) -> List[Invoice]:
        return await self.find_many({"customer_id": customer_id, "status": InvoiceStatus.OPEN})
