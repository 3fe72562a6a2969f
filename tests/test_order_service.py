from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from storefront.core.exceptions import SubmitError, SubmitErrorKind, ValidationCode
from storefront.domain.order import ANONYMOUS_USER, CheckoutFields, OrderConfirmation, PlatformUser
from storefront.services.cart import CartStore
from storefront.services.order_service import OrderSubmitter, build_order_payload

from conftest import make_product


class FakeGateway:
    token = "secret-token"

    def __init__(self, error: SubmitError | None = None) -> None:
        self.error = error
        self.payloads: list[dict] = []
        self.close = AsyncMock()

    async def place_order(self, payload: dict) -> OrderConfirmation:
        self.payloads.append(payload)
        if self.error:
            raise self.error
        return OrderConfirmation(order_id="42", raw={"ok": True, "orderId": "42"})


@pytest.fixture()
def two_milks(milk) -> CartStore:
    cart = CartStore()
    cart.add(milk)
    cart.add(milk)
    return cart


def test_payload_for_example_order(valid_fields, two_milks) -> None:
    payload = build_order_payload(valid_fields, two_milks, token="secret-token").to_dict()

    assert payload["items"] == [
        {"id": "P1", "name": "Молоко", "unit": "л", "price": 500, "qty": 2, "sum": 1000}
    ]
    assert payload["total"] == 1000
    assert payload["delivery"] == 200
    assert payload["grandTotal"] == 1200
    assert payload["name"] == "Анна"
    assert payload["phone"] == "+7 900 123-45-67"
    assert payload["address"] == "ул. Полевая, 5"
    assert payload["comment"] == "позвонить заранее"
    assert payload["token"] == "secret-token"
    assert payload["tg"] == {}


def test_payload_fractional_prices_stay_fractional(valid_fields) -> None:
    cart = CartStore()
    cart.set_quantity("H", 3, product=make_product("H", "99.90"))

    item = build_order_payload(valid_fields, cart).to_dict()["items"][0]

    assert item["price"] == pytest.approx(99.9)
    assert item["sum"] == pytest.approx(299.7)


def test_payload_carries_platform_user(valid_fields, two_milks) -> None:
    user = PlatformUser(id=7, username="anna", first_name="Анна", last_name=None)

    payload = build_order_payload(valid_fields, two_milks, user=user).to_dict()

    assert payload["tg"] == {"id": 7, "username": "anna", "first_name": "Анна", "last_name": None}


def test_each_build_is_a_fresh_snapshot(valid_fields, two_milks) -> None:
    first = build_order_payload(valid_fields, two_milks)
    two_milks.add(make_product("P1", 500))
    second = build_order_payload(valid_fields, two_milks)

    assert first.items[0].qty == 2
    assert second.items[0].qty == 3
    assert first is not second


@pytest.mark.asyncio
async def test_submit_success_leaves_cart_to_caller(valid_fields, two_milks) -> None:
    gateway = FakeGateway()

    result = await OrderSubmitter(gateway).submit(valid_fields, two_milks)

    assert result.success
    assert result.confirmation.order_id == "42"
    assert result.totals.grand_total == 1200
    assert gateway.payloads[0]["grandTotal"] == 1200
    assert two_milks.count() == 2


@pytest.mark.asyncio
async def test_invalid_form_never_reaches_network(two_milks) -> None:
    gateway = FakeGateway()

    result = await OrderSubmitter(gateway).submit(CheckoutFields(name="A"), two_milks)

    assert not result.success
    assert result.error.code is ValidationCode.NAME_TOO_SHORT
    assert gateway.payloads == []


@pytest.mark.asyncio
async def test_empty_cart_never_reaches_network(valid_fields) -> None:
    gateway = FakeGateway()

    result = await OrderSubmitter(gateway).submit(valid_fields, CartStore(), ANONYMOUS_USER)

    assert result.error.code is ValidationCode.CART_EMPTY
    assert result.error_message == "Корзина пустая."
    assert gateway.payloads == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kind",
    [SubmitErrorKind.TIMEOUT, SubmitErrorKind.NETWORK_ERROR, SubmitErrorKind.SERVER_REJECTED],
)
async def test_gateway_errors_become_results(valid_fields, two_milks, kind) -> None:
    gateway = FakeGateway(error=SubmitError(kind, "nope"))

    result = await OrderSubmitter(gateway).submit(valid_fields, two_milks)

    assert not result.success
    assert result.error.kind is kind
    assert result.error_message == "nope"
    assert len(gateway.payloads) == 1


@pytest.mark.asyncio
async def test_end_to_end_against_fake_api(sheets_api, sheets_client, valid_fields, two_milks) -> None:
    fake, _url = sheets_api

    result = await OrderSubmitter(sheets_client).submit(valid_fields, two_milks)

    assert result.success
    body = fake.orders[0]["body"]
    assert body["items"] == [
        {"id": "P1", "name": "Молоко", "unit": "л", "price": 500, "qty": 2, "sum": 1000}
    ]
    assert (body["total"], body["delivery"], body["grandTotal"]) == (1000, 200, 1200)
    assert body["token"] == "secret-token"


@pytest.mark.asyncio
async def test_undecodable_rejection_becomes_result(sheets_api, sheets_client, valid_fields, two_milks) -> None:
    fake, _url = sheets_api
    fake.order_body = b'{"ok": false, "error": "\xff\xfe"}'

    result = await OrderSubmitter(sheets_client).submit(valid_fields, two_milks)

    assert not result.success
    assert isinstance(result.error, SubmitError)
    assert result.error.kind is SubmitErrorKind.SERVER_REJECTED
    assert two_milks.quantity_of("P1") == 2
