from decimal import Decimal
from typing import Optional

from sqlalchemy import Numeric
from sqlmodel import Field

from backoffice.core.exceptions import InvalidValueObjectError, ValidationError
from backoffice.domain.entities.base import BaseEntity
from backoffice.domain.value_objects.price import Price


class Product(BaseEntity, table=True):
    """A sellable item with a tracked stock level."""

    __tablename__ = "products"

    name: str = Field(max_length=150, index=True, nullable=False)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: Decimal = Field(default=Decimal("0.00"), sa_type=Numeric(10, 2), nullable=False)
    currency: str = Field(default="PEN", max_length=3, nullable=False)
    stock: int = Field(default=0, nullable=False)

    @classmethod
    def create(
        cls,
        name: str,
        price: Price,
        stock: int = 0,
        description: Optional[str] = None,
    ) -> "Product":
        name = (name or "").strip()
        if not name:
            raise InvalidValueObjectError("Product name cannot be empty")
        if stock < 0:
            raise InvalidValueObjectError("Stock cannot be negative")
        return cls(
            name=name,
            description=description,
            price=price.amount,
            currency=price.currency,
            stock=stock,
        )

    @property
    def unit_price(self) -> Price:
        return Price(self.price, self.currency)

    def increment_stock(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("Quantity must be positive", code="invalid_quantity")
        self.stock += quantity
        self.touch()

    def decrement_stock(self, quantity: int) -> None:
        """Removes units from stock.

        Raises:
            ValidationError: If quantity is not positive or exceeds the stock.
        """
        if quantity <= 0:
            raise ValidationError("Quantity must be positive", code="invalid_quantity")
        if quantity > self.stock:
            raise ValidationError(
                f"Insufficient stock: requested {quantity}, available {self.stock}",
                code="insufficient_stock",
            )
        self.stock -= quantity
        self.touch()

    @property
    def is_available(self) -> bool:
        return self.is_active and self.stock > 0
