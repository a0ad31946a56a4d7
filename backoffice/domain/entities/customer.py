"""Customer aggregate.

A `Customer` owns contacts and addresses, which are removed along with it on
hard delete. Invoices reference the customer but block its hard deletion, and
open invoices also block deactivation.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Numeric
from sqlmodel import Field

from backoffice.core.exceptions import InvalidValueObjectError
from backoffice.domain.entities.base import BaseEntity
from backoffice.domain.value_objects.email import Email
from backoffice.domain.value_objects.price import Price


class InvoiceStatus(str, Enum):
    OPEN = "open"
    PAID = "paid"
    VOID = "void"


class Customer(BaseEntity, table=True):
    __tablename__ = "customers"

    name: str = Field(max_length=150, index=True, nullable=False)
    email: Optional[str] = Field(default=None, max_length=254, unique=True)
    tax_id: Optional[str] = Field(default=None, max_length=20, unique=True)

    @classmethod
    def create(
        cls,
        name: str,
        email: Optional[str] = None,
        tax_id: Optional[str] = None,
    ) -> "Customer":
        name = (name or "").strip()
        if not name:
            raise InvalidValueObjectError("Customer name cannot be empty")
        return cls(
            name=name,
            email=Email(email).value if email else None,
            tax_id=tax_id.strip() if tax_id else None,
        )


class Contact(BaseEntity, table=True):
    __tablename__ = "contacts"

    customer_id: str = Field(
        foreign_key="customers.id", ondelete="CASCADE", index=True, nullable=False
    )
    name: str = Field(max_length=150, nullable=False)
    email: Optional[str] = Field(default=None, max_length=254)
    phone: Optional[str] = Field(default=None, max_length=30)

    @classmethod
    def create(
        cls,
        customer_id: str,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> "Contact":
        name = (name or "").strip()
        if not name:
            raise InvalidValueObjectError("Contact name cannot be empty")
        return cls(
            customer_id=customer_id,
            name=name,
            email=Email(email).value if email else None,
            phone=phone,
        )


class Address(BaseEntity, table=True):
    __tablename__ = "addresses"

    customer_id: str = Field(
        foreign_key="customers.id", ondelete="CASCADE", index=True, nullable=False
    )
    line1: str = Field(max_length=200, nullable=False)
    city: str = Field(max_length=100, nullable=False)
    country: str = Field(default="PE", max_length=2, nullable=False)

    @classmethod
    def create(cls, customer_id: str, line1: str, city: str, country: str = "PE") -> "Address":
        if not (line1 or "").strip() or not (city or "").strip():
            raise InvalidValueObjectError("Address line and city are required")
        country = (country or "").strip().upper()
        if len(country) != 2:
            raise InvalidValueObjectError("Country must be a 2-letter ISO code")
        return cls(customer_id=customer_id, line1=line1.strip(), city=city.strip(), country=country)


class Invoice(BaseEntity, table=True):
    """A billing document issued to a customer."""

    __tablename__ = "invoices"

    customer_id: str = Field(
        foreign_key="customers.id", ondelete="RESTRICT", index=True, nullable=False
    )
    number: str = Field(max_length=30, unique=True, index=True, nullable=False)
    status: InvoiceStatus = Field(
        default=InvoiceStatus.OPEN,
        sa_type=SAEnum(InvoiceStatus, name="invoice_status", native_enum=False),
        nullable=False,
    )
    total: Decimal = Field(default=Decimal("0.00"), sa_type=Numeric(12, 2), nullable=False)
    currency: str = Field(default="PEN", max_length=3, nullable=False)

    @classmethod
    def create(cls, customer_id: str, number: str, total: Price) -> "Invoice":
        number = (number or "").strip().upper()
        if not number:
            raise InvalidValueObjectError("Invoice number cannot be empty")
        return cls(
            customer_id=customer_id,
            number=number,
            total=total.amount,
            currency=total.currency,
        )

    @property
    def is_open(self) -> bool:
        return self.status is InvoiceStatus.OPEN

    def mark_paid(self) -> None:
        self.status = InvoiceStatus.PAID
        self.touch()

    def void(self) -> None:
        self.status = InvoiceStatus.VOID
        self.touch()
