import pytest

from pos_bridge.core.exceptions import InvalidInput
from pos_bridge.models import Customer, Order
from pos_bridge.services.epos.outbound import EposOutboundService, apply_discounts
from tests.mocks.mock_epos import ok, rejected


@pytest.fixture
def outbound(mock_epos_client, store, sync_log, settings):
    return EposOutboundService(mock_epos_client, store, sync_log, settings)


@pytest.fixture
async def customer(db_session, sample_customer_data):
    customer = Customer(**sample_customer_data)
    db_session.add(customer)
    await db_session.commit()
    return customer


# Orders

@pytest.mark.asyncio
async def test_unmapped_payment_method_sends_nothing(outbound, mock_epos_client, make_order, read_sync_log):
    order = await make_order(payment="bank_transfer")

    with pytest.raises(InvalidInput):
        await outbound.create_order(order)

    assert mock_epos_client.calls == []
    assert order.pos_id is None
    lines = read_sync_log()
    assert len(lines) == 1
    assert lines[0].endswith(
        "#outgoing Cannot create tender with type: bank_transfer. Missing map in EposOutboundService"
    )


@pytest.mark.asyncio
async def test_create_order_builds_discounted_transaction(outbound, mock_epos_client, make_order, settings):
    order = await make_order(
        payment="paypal",
        customer_pos_id="77",
        discount_name="Summer sale",
        discount_percent=10,
        discount_code_name="WELCOME",
        discount_code_percent=20,
    )
    mock_epos_client.respond("GET", "Customer/77", ok({"CustomerID": 77}))
    mock_epos_client.respond("POST", "CompleteTransaction/", ok({"TransactionID": 555}, status_code=201))

    pos_id = await outbound.create_order(order)

    assert pos_id == "555"
    assert order.pos_id == "555"
    assert mock_epos_client.endpoints == ["GET Customer/77", "POST CompleteTransaction/"]

    transaction = mock_epos_client.calls[-1][2]
    assert transaction["CustomerID"] == "77"
    assert transaction["EatOut"] == settings.EPOS_EAT_OUT
    assert transaction["Tenders"] == [{"TypeID": 25245, "Amount": 35.0}]

    [item] = transaction["TransactionItems"]
    assert item["ProductID"] == "1001"
    assert item["Quantity"] == pytest.approx(6.0)
    assert item["Price"] == pytest.approx(3.6)

    [delivery] = transaction["BaseItems"]
    assert delivery["ItemTypeID"] == settings.EPOS_DELIVERY_ITEM_TYPE_ID
    assert delivery["Amount"] == pytest.approx(3.6)
    assert delivery["Notes"] == "Courier"


@pytest.mark.asyncio
async def test_create_order_registers_customer_first(outbound, mock_epos_client, make_order):
    order = await make_order()
    mock_epos_client.respond("POST", "Customer/", ok({"CustomerID": 77}))
    mock_epos_client.respond("POST", "CustomerAddress/", ok({"CustomerAddressID": 99}))
    mock_epos_client.respond("PUT", "Customer/77", ok({"CustomerID": 77}))
    mock_epos_client.respond("POST", "CompleteTransaction/", ok({"TransactionID": 555}))

    await outbound.create_order(order)

    assert mock_epos_client.endpoints == [
        "POST Customer/",
        "POST CustomerAddress/",
        "PUT Customer/77",
        "POST CompleteTransaction/",
    ]
    assert mock_epos_client.calls[-1][2]["CustomerID"] == "77"
    assert mock_epos_client.calls[-1][2]["Tenders"][0]["TypeID"] == 1534


@pytest.mark.asyncio
async def test_rejected_transaction_is_not_persisted(outbound, mock_epos_client, make_order, store):
    order = await make_order(with_customer=False)
    mock_epos_client.respond("POST", "CompleteTransaction/", rejected({"Message": "Invalid ProductID"}))

    assert await outbound.create_order(order) is None

    reloaded = await store.get_order(order.id)
    assert reloaded.pos_id is None
    assert mock_epos_client.calls[-1][2]["CustomerID"] is None


@pytest.mark.asyncio
async def test_create_order_already_synced_is_skipped(outbound, mock_epos_client, make_order):
    order = await make_order(with_customer=False, pos_id="555")

    assert await outbound.create_order(order) == "555"
    assert mock_epos_client.calls == []


@pytest.mark.asyncio
async def test_confirm_and_cancel_order(outbound, mock_epos_client, make_order):
    order = await make_order(with_customer=False, pos_id="555")
    mock_epos_client.respond("PUT", "Transaction/555", ok({"TransactionID": 555}))
    mock_epos_client.respond("PUT", "Transaction/555", ok({"TransactionID": 555}))

    assert await outbound.confirm_order(order) is True
    assert await outbound.cancel_order(order) is True

    assert [call[2] for call in mock_epos_client.calls] == [
        {"PaymentStatus": "Complete"},
        {"PaymentStatus": "Hold"},
    ]


@pytest.mark.asyncio
async def test_confirm_unsynced_order_is_skipped(outbound, mock_epos_client, make_order, read_sync_log):
    order = await make_order(with_customer=False)

    assert await outbound.confirm_order(order) is False
    assert mock_epos_client.calls == []
    assert read_sync_log()[-1].endswith(f"#outgoing Skipping payment status Complete of Order {order.id}: not registered in ePOS Now")


def test_apply_discounts_needs_name_and_percent():
    assert apply_discounts(100, Order(discount_percent=10)) == 100
    assert apply_discounts(100, Order(discount_code_name="CODE")) == 100
    assert apply_discounts(100, Order(discount_name="Sale", discount_percent=10)) == pytest.approx(90)
    assert apply_discounts(
        100, Order(discount_name="Sale", discount_percent=10, discount_code_name="CODE", discount_code_percent=50)
    ) == pytest.approx(45)


# Customers

@pytest.mark.asyncio
async def test_create_customer_with_address(outbound, mock_epos_client, customer, store):
    mock_epos_client.respond("POST", "Customer/", ok({"CustomerID": 77}, status_code=201))
    mock_epos_client.respond("POST", "CustomerAddress/", ok({"CustomerAddressID": 99}, status_code=201))
    mock_epos_client.respond("PUT", "Customer/77", ok({"CustomerID": 77}))

    assert await outbound.create_customer(customer) == "77"

    reloaded = await store.get_customer(customer.id)
    assert reloaded.pos_id == "77"

    _, _, customer_body = mock_epos_client.calls[0]
    assert customer_body["Forename"] == "Jane Doe"
    assert customer_body["MaxCredit"] == 0
    assert customer_body["EmailAddress"] == "jane@example.com"
    assert customer_body["ContactNumber"] == "+44 7700 900123"

    _, _, address_body = mock_epos_client.calls[1]
    assert address_body == {
        "CustomerID": "77",
        "Name": "Main address",
        "AddressLine1": "1 Market Street",
        "AddressLine2": "AB1 2CD - Leeds",
        "Town": "Leeds",
        "PostCode": "AB1 2CD",
    }
    assert mock_epos_client.calls[2] == ("PUT", "Customer/77", {"MainAddressID": 99})


@pytest.mark.asyncio
async def test_failed_address_is_not_linked(outbound, mock_epos_client, customer):
    mock_epos_client.respond("POST", "Customer/", ok({"CustomerID": 77}))
    mock_epos_client.respond("POST", "CustomerAddress/", rejected({"Message": "PostCode too long"}))

    assert await outbound.create_customer(customer) == "77"
    assert mock_epos_client.endpoints == ["POST Customer/", "POST CustomerAddress/"]


@pytest.mark.asyncio
async def test_create_customer_without_city_skips_address(outbound, mock_epos_client, customer):
    customer.city = None
    mock_epos_client.respond("POST", "Customer/", ok({"CustomerID": 77}))

    await outbound.create_customer(customer)

    assert mock_epos_client.endpoints == ["POST Customer/"]


@pytest.mark.asyncio
async def test_registered_customer_is_not_created_again(outbound, mock_epos_client, customer):
    customer.pos_id = "77"
    mock_epos_client.respond("GET", "Customer/77", ok({"CustomerID": 77}))

    assert await outbound.create_customer(customer) == "77"
    assert mock_epos_client.endpoints == ["GET Customer/77"]


@pytest.mark.asyncio
async def test_failed_customer_creation_keeps_local_state(outbound, mock_epos_client, customer):
    assert await outbound.create_customer(customer) is None
    assert customer.pos_id is None
    assert mock_epos_client.endpoints == ["POST Customer/"]


@pytest.mark.asyncio
async def test_update_customer_strips_plus_from_phone(outbound, mock_epos_client, customer):
    customer.pos_id = "77"
    mock_epos_client.respond("PUT", "Customer/77", ok({"CustomerID": 77}))

    assert await outbound.update_customer(customer) is True
    assert mock_epos_client.calls[0][2]["ContactNumber"] == "44 7700 900123"


@pytest.mark.asyncio
async def test_remove_customer(outbound, mock_epos_client, customer):
    assert await outbound.remove_customer(customer) is False
    assert mock_epos_client.calls == []

    customer.pos_id = "77"
    mock_epos_client.respond("DELETE", "Customer/77", ok({}))
    assert await outbound.remove_customer(customer) is True
    assert mock_epos_client.endpoints == ["DELETE Customer/77"]


@pytest.mark.asyncio
async def test_has_customer_address(outbound, mock_epos_client, customer):
    customer.pos_id = "77"
    mock_epos_client.respond("GET", "Customer/77", ok({"CustomerID": 77, "MainAddressID": 99}))
    mock_epos_client.respond("GET", "Customer/77", ok({"CustomerID": 77, "MainAddressID": None}))

    assert await outbound.has_customer_address(customer) is True
    assert await outbound.has_customer_address(customer) is False
