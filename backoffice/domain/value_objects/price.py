"""Monetary price value object."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import ClassVar, Union

from backoffice.core.exceptions import InvalidValueObjectError


@dataclass(frozen=True, slots=True)
class Price:
    """A non-negative amount with two decimal places and a currency code."""

    amount: Decimal
    currency: str = "PEN"

    MAX_AMOUNT: ClassVar[Decimal] = Decimal("99999999.99")

    def __post_init__(self) -> None:
        try:
            amount = Decimal(str(self.amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        except (InvalidOperation, ValueError):
            raise InvalidValueObjectError(f"Invalid price amount: {self.amount!r}") from None
        if amount < 0:
            raise InvalidValueObjectError("Price cannot be negative")
        if amount > self.MAX_AMOUNT:
            raise InvalidValueObjectError(f"Price cannot exceed {self.MAX_AMOUNT}")
        currency = (self.currency or "").strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise InvalidValueObjectError("Currency must be a 3-letter ISO code")
        object.__setattr__(self, "amount", amount)
        object.__setattr__(self, "currency", currency)

    @classmethod
    def of(cls, amount: Union[Decimal, int, float, str], currency: str = "PEN") -> "Price":
        return cls(amount=amount, currency=currency)

    def __str__(self) -> str:
        return f"{self.currency} {self.amount}"
