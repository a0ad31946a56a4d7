import pytest

from backoffice.core.exceptions import (
    ConflictError,
    DeactivationRestrictedError,
    EntityNotFoundError,
    ValidationError,
)
from backoffice.domain.entities import Address, Contact, Customer, Invoice, InvoiceStatus
from backoffice.domain.value_objects.deactivation import (
    DeactivationCommand,
    DeactivationStrategy,
    ReactivationCommand,
    SoftDeleteCascadeConfig,
)
from backoffice.infrastructure.repositories import (
    AddressRepository,
    ContactRepository,
    CustomerRepository,
    InvoiceRepository,
)
from tests.factories import (
    create_fake_address,
    create_fake_contact,
    create_fake_customer,
    create_fake_invoice,
)

pytestmark = pytest.mark.integration


@pytest.fixture
def customers(db_session):
    return CustomerRepository(db_session)


async def _load(session_factory, model, entity_id):
    async with session_factory() as session:
        return await session.get(model, entity_id)


async def _seed(db_session, invoice_status=None):
    customer = create_fake_customer()
    await CustomerRepository(db_session).create(customer)
    contacts = [create_fake_contact(customer.id) for _ in range(2)]
    for contact in contacts:
        await ContactRepository(db_session).create(contact)
    address = create_fake_address(customer.id)
    await AddressRepository(db_session).create(address)
    invoice = None
    if invoice_status is not None:
        invoice = create_fake_invoice(customer.id, status=invoice_status)
        await InvoiceRepository(db_session).create(invoice)
    return customer, contacts, address, invoice


async def test_soft_delete_cascades_one_hop(customers, db_session, session_factory):
    customer, contacts, address, _ = await _seed(db_session)

    result = await customers.toggle_is_active(
        DeactivationCommand(id=customer.id, cascade=SoftDeleteCascadeConfig.of("contacts"))
    )

    assert result.is_active is False
    assert result.deleted_at is not None
    for contact in contacts:
        stored = await _load(session_factory, Contact, contact.id)
        assert stored.is_active is False
        assert stored.deleted_at is not None
    stored_address = await _load(session_factory, Address, address.id)
    assert stored_address.is_active is True


async def test_soft_delete_without_cascade_leaves_relations(customers, db_session, session_factory):
    customer, contacts, _, _ = await _seed(db_session)

    await customers.toggle_is_active(DeactivationCommand(id=customer.id))

    assert (await _load(session_factory, Customer, customer.id)).is_active is False
    assert (await _load(session_factory, Contact, contacts[0].id)).is_active is True


async def test_soft_delete_is_idempotent(customers, db_session, session_factory):
    customer, _, _, _ = await _seed(db_session)
    command = DeactivationCommand(
        id=customer.id, cascade=SoftDeleteCascadeConfig.of("contacts", "addresses")
    )

    first = await customers.toggle_is_active(command)
    first_deleted_at = first.deleted_at
    second = await customers.toggle_is_active(command)

    assert second.is_active is False
    assert second.deleted_at == first_deleted_at


async def test_already_inactive_relations_are_untouched(customers, db_session, session_factory):
    customer, contacts, _, _ = await _seed(db_session)
    await ContactRepository(db_session).toggle_is_active(DeactivationCommand(id=contacts[0].id))
    earlier = (await _load(session_factory, Contact, contacts[0].id)).deleted_at

    await customers.toggle_is_active(
        DeactivationCommand(id=customer.id, cascade=SoftDeleteCascadeConfig.of("contacts"))
    )

    assert (await _load(session_factory, Contact, contacts[0].id)).deleted_at == earlier
    assert (await _load(session_factory, Contact, contacts[1].id)).is_active is False


async def test_unknown_cascade_relation_is_rejected_before_any_change(
    customers, db_session, session_factory
):
    customer, _, _, _ = await _seed(db_session)

    with pytest.raises(ValidationError) as exc_info:
        await customers.toggle_is_active(
            DeactivationCommand(id=customer.id, cascade=SoftDeleteCascadeConfig.of("orders"))
        )

    assert exc_info.value.code == "unknown_cascade_relation"
    assert (await _load(session_factory, Customer, customer.id)).is_active is True


async def test_missing_entity(customers):
    with pytest.raises(EntityNotFoundError):
        await customers.toggle_is_active(DeactivationCommand(id="does-not-exist"))


async def test_open_invoice_blocks_soft_delete(customers, db_session, session_factory):
    customer, contacts, _, _ = await _seed(db_session, invoice_status=InvoiceStatus.OPEN)

    with pytest.raises(DeactivationRestrictedError) as exc_info:
        await customers.toggle_is_active(
            DeactivationCommand(id=customer.id, cascade=SoftDeleteCascadeConfig.of("contacts"))
        )

    assert exc_info.value.message == "Cannot deactivate a customer with open invoices"
    assert exc_info.value.blocked_by == ["invoices"]
    assert (await _load(session_factory, Customer, customer.id)).is_active is True
    assert (await _load(session_factory, Contact, contacts[0].id)).is_active is True


async def test_paid_invoice_does_not_block_soft_delete(customers, db_session):
    customer, _, _, _ = await _seed(db_session, invoice_status=InvoiceStatus.PAID)

    result = await customers.toggle_is_active(DeactivationCommand(id=customer.id))

    assert result.is_active is False


async def test_skipped_restriction_allows_soft_delete(customers, db_session, session_factory):
    customer, _, _, invoice = await _seed(db_session, invoice_status=InvoiceStatus.OPEN)

    result = await customers.toggle_is_active(
        DeactivationCommand(
            id=customer.id,
            cascade=SoftDeleteCascadeConfig.of("invoices"),
            skipped_restrictions=["invoices"],
        )
    )

    assert result.is_active is False
    assert (await _load(session_factory, Invoice, invoice.id)).is_active is False


async def test_validate_restrictions_reports_violations(customers, db_session):
    customer, _, _, _ = await _seed(db_session, invoice_status=InvoiceStatus.OPEN)

    result = await customers.validate_deactivation_restrictions(customer)
    skipped = await customers.validate_deactivation_restrictions(customer, ["invoices"])

    assert not result.can_deactivate
    assert result.blocked_by == ("invoices",)
    assert skipped.can_deactivate


async def test_hard_delete_ignores_skip_list(customers, db_session, session_factory):
    customer, _, _, _ = await _seed(db_session, invoice_status=InvoiceStatus.OPEN)

    with pytest.raises(DeactivationRestrictedError):
        await customers.toggle_is_active(
            DeactivationCommand(
                id=customer.id,
                strategy=DeactivationStrategy.HARD,
                skipped_restrictions=["invoices"],
            )
        )

    assert await _load(session_factory, Customer, customer.id) is not None


async def test_hard_delete_blocked_by_restricting_relation(customers, db_session, session_factory):
    customer, _, _, _ = await _seed(db_session, invoice_status=InvoiceStatus.PAID)

    with pytest.raises(ConflictError) as exc_info:
        await customers.toggle_is_active(
            DeactivationCommand(id=customer.id, strategy=DeactivationStrategy.HARD)
        )

    assert exc_info.value.code == "dependent_records_exist"
    assert await _load(session_factory, Customer, customer.id) is not None


async def test_hard_delete_removes_cascading_relations(customers, db_session, session_factory):
    customer, contacts, address, _ = await _seed(db_session)

    removed = await customers.toggle_is_active(
        DeactivationCommand(
            id=customer.id,
            strategy=DeactivationStrategy.HARD,
            cascade=SoftDeleteCascadeConfig.of("contacts"),
        )
    )

    assert removed.id == customer.id
    assert await _load(session_factory, Customer, customer.id) is None
    assert await _load(session_factory, Contact, contacts[0].id) is None
    assert await _load(session_factory, Address, address.id) is None


async def test_reactivate_without_cascade(customers, db_session, session_factory):
    customer, contacts, _, _ = await _seed(db_session)
    cascade = SoftDeleteCascadeConfig.of("contacts")
    await customers.toggle_is_active(DeactivationCommand(id=customer.id, cascade=cascade))

    result = await customers.reactivate(ReactivationCommand(id=customer.id, cascade=cascade))

    assert result.is_active is True
    assert result.deleted_at is None
    assert (await _load(session_factory, Contact, contacts[0].id)).is_active is False


async def test_reactivate_with_cascade(customers, db_session, session_factory):
    customer, contacts, _, _ = await _seed(db_session)
    cascade = SoftDeleteCascadeConfig.of("contacts", cascade_on_reactivation=True)
    await customers.toggle_is_active(DeactivationCommand(id=customer.id, cascade=cascade))

    await customers.reactivate(ReactivationCommand(id=customer.id, cascade=cascade))

    for contact in contacts:
        stored = await _load(session_factory, Contact, contact.id)
        assert stored.is_active is True
        assert stored.deleted_at is None


async def test_deactivate_many(customers, db_session, session_factory):
    first, _, _, _ = await _seed(db_session)
    second, _, _, _ = await _seed(db_session)

    result = await customers.deactivate_many([first.id, second.id, first.id])

    assert [entity.id for entity in result] == [first.id, second.id]
    assert (await _load(session_factory, Customer, first.id)).is_active is False
    assert (await _load(session_factory, Customer, second.id)).is_active is False


async def test_deactivate_many_is_all_or_nothing(customers, db_session, session_factory):
    free, free_contacts, _, _ = await _seed(db_session)
    blocked, _, _, _ = await _seed(db_session, invoice_status=InvoiceStatus.OPEN)

    with pytest.raises(DeactivationRestrictedError):
        await customers.deactivate_many(
            [free.id, blocked.id], cascade=SoftDeleteCascadeConfig.of("contacts")
        )

    assert (await _load(session_factory, Customer, free.id)).is_active is True
    assert (await _load(session_factory, Contact, free_contacts[0].id)).is_active is True
    assert (await _load(session_factory, Customer, blocked.id)).is_active is True


async def test_reactivate_many_with_cascade(customers, db_session, session_factory):
    first, first_contacts, _, _ = await _seed(db_session)
    second, second_contacts, _, _ = await _seed(db_session)
    cascade = SoftDeleteCascadeConfig.of("contacts", cascade_on_reactivation=True)
    await customers.deactivate_many([first.id, second.id], cascade=cascade)

    result = await customers.reactivate_many([second.id, first.id, second.id], cascade=cascade)

    assert [entity.id for entity in result] == [second.id, first.id]
    for customer_id in (first.id, second.id):
        stored = await _load(session_factory, Customer, customer_id)
        assert stored.is_active is True
        assert stored.deleted_at is None
    for contact in first_contacts + second_contacts:
        assert (await _load(session_factory, Contact, contact.id)).is_active is True


async def test_reactivate_many_without_ids(customers):
    assert await customers.reactivate_many([]) == []


async def test_reactivate_many_is_all_or_nothing(customers, db_session, session_factory):
    first, first_contacts, _, _ = await _seed(db_session)
    second, _, _, _ = await _seed(db_session)
    cascade = SoftDeleteCascadeConfig.of("contacts", cascade_on_reactivation=True)
    await customers.deactivate_many([first.id, second.id], cascade=cascade)

    with pytest.raises(EntityNotFoundError):
        await customers.reactivate_many([first.id, "does-not-exist", second.id], cascade=cascade)

    assert (await _load(session_factory, Customer, first.id)).is_active is False
    assert (await _load(session_factory, Contact, first_contacts[0].id)).is_active is False
    assert (await _load(session_factory, Customer, second.id)).is_active is False


async def test_customer_scoped_lookups(customers, db_session):
    customer, _, address, invoice = await _seed(db_session, invoice_status=InvoiceStatus.OPEN)
    await InvoiceRepository(db_session).create(
        create_fake_invoice(customer.id, status=InvoiceStatus.PAID)
    )
    await customers.toggle_is_active(
        DeactivationCommand(
            id=customer.id,
            cascade=SoftDeleteCascadeConfig.of("contacts"),
            skipped_restrictions=["invoices"],
        )
    )

    assert await ContactRepository(db_session).find_by_customer(customer.id) == []
    assert len(await ContactRepository(db_session).find_by_customer(customer.id, include_inactive=True)) == 2
    assert [a.id for a in await AddressRepository(db_session).find_by_customer(customer.id)] == [address.id]
    assert [i.id for i in await InvoiceRepository(db_session).find_open_by_customer(customer.id)] == [invoice.id]
