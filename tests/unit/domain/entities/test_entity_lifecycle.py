from decimal import Decimal

import pytest

from backoffice.core.exceptions import InvalidValueObjectError, ValidationError
from backoffice.domain.entities import Customer, Invoice, InvoiceStatus, Permission, Product, User
from backoffice.domain.value_objects.price import Price


def test_new_entity_is_active_with_uuid():
    customer = Customer.create(name="ACME")

    assert customer.is_active
    assert customer.deleted_at is None
    assert len(customer.id) == 36
    assert not customer.is_persisted


def test_soft_delete_sets_deleted_at():
    customer = Customer.create(name="ACME")

    customer.soft_delete()

    assert not customer.is_active
    assert customer.deleted_at is not None
    assert customer.updated_at == customer.deleted_at


def test_activate_clears_deleted_at():
    customer = Customer.create(name="ACME")
    customer.soft_delete()

    customer.activate()

    assert customer.is_active
    assert customer.deleted_at is None


def test_user_email_is_normalized():
    user = User.create(email="Admin@Example.com", name="Admin", hashed_password="hash")

    assert user.email == "admin@example.com"


def test_user_requires_name():
    with pytest.raises(InvalidValueObjectError):
        User.create(email="admin@example.com", name=" ", hashed_password="hash")


@pytest.mark.parametrize("name", ["products", "products:", ":read", "Products Read"])
def test_permission_name_format(name):
    with pytest.raises(InvalidValueObjectError):
        Permission.create(name)


def test_permission_parts():
    permission = Permission.create("Products:Update")

    assert permission.resource == "products"
    assert permission.action == "update"


def test_product_stock_rules():
    product = Product.create(name="Widget", price=Price.of("9.90"), stock=5)

    product.increment_stock(3)
    product.decrement_stock(8)

    assert product.stock == 0
    assert not product.is_available


def test_product_cannot_go_below_zero():
    product = Product.create(name="Widget", price=Price.of("9.90"), stock=2)

    with pytest.raises(ValidationError) as exc_info:
        product.decrement_stock(3)

    assert exc_info.value.code == "insufficient_stock"
    assert product.stock == 2


@pytest.mark.parametrize("quantity", [0, -1])
def test_stock_quantity_must_be_positive(quantity):
    product = Product.create(name="Widget", price=Price.of("9.90"), stock=2)

    with pytest.raises(ValidationError):
        product.increment_stock(quantity)


def test_invoice_lifecycle():
    invoice = Invoice.create(customer_id="c-1", number="f001-1", total=Price.of(Decimal("100")))

    assert invoice.number == "F001-1"
    assert invoice.is_open

    invoice.mark_paid()

    assert invoice.status is InvoiceStatus.PAID
    assert not invoice.is_open
