from decimal import Decimal

import pytest

from backoffice.core.exceptions import InvalidValueObjectError
from backoffice.domain.value_objects.email import Email
from backoffice.domain.value_objects.pagination import PaginatedResult, PaginationParams
from backoffice.domain.value_objects.price import Price


def test_pagination_offset():
    assert PaginationParams(page=3, page_size=20).offset == 40


@pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0), (1, 101)])
def test_pagination_bounds(page, page_size):
    with pytest.raises(InvalidValueObjectError):
        PaginationParams(page=page, page_size=page_size)


def test_paginated_result_navigation():
    result = PaginatedResult(items=[1, 2], total=5, page=2, page_size=2)

    assert result.total_pages == 3
    assert result.has_next
    assert result.has_previous


def test_empty_paginated_result():
    result = PaginatedResult(items=[], total=0, page=1, page_size=10)

    assert result.total_pages == 0
    assert not result.has_next
    assert not result.has_previous


def test_email_is_normalized():
    assert Email("  John.Doe@Example.COM ").value == "john.doe@example.com"


@pytest.mark.parametrize("raw", ["not-an-email", "a@b", "@example.com"])
def test_invalid_email(raw):
    with pytest.raises(InvalidValueObjectError):
        Email(raw)


def test_email_masking():
    assert Email("user@example.com").mask_for_logging() == "us**@e*********m"


def test_price_rounds_to_cents():
    price = Price.of("10.005", "usd")

    assert price.amount == Decimal("10.01")
    assert price.currency == "USD"


@pytest.mark.parametrize("amount", ["-1", "abc"])
def test_invalid_price(amount):
    with pytest.raises(InvalidValueObjectError):
        Price.of(amount)
