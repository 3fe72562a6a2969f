from __future__ import annotations

import asyncio

import pytest

from storefront.core.exceptions import SubmitError, SubmitErrorKind
from storefront.domain.order import OrderConfirmation, PlatformUser
from storefront.services.cart import CartStore
from storefront.services.checkout import CheckoutSession
from storefront.services.order_service import OrderSubmitter

from test_order_service import FakeGateway


class SlowGateway(FakeGateway):
    def __init__(self) -> None:
        super().__init__()
        self.release = asyncio.Event()

    async def place_order(self, payload: dict) -> OrderConfirmation:
        self.payloads.append(payload)
        await self.release.wait()
        return OrderConfirmation(order_id="1")


def _session(gateway, milk, user=None) -> CheckoutSession:
    cart = CartStore()
    cart.add(milk)
    session = CheckoutSession(cart, OrderSubmitter(gateway), user or PlatformUser(id=5))
    session.form.name = "Анна"
    session.form.phone = "+79001234567"
    session.form.address = "ул. Полевая, 5"
    session.form.comment = "домофон 12"
    return session


@pytest.mark.asyncio
async def test_success_clears_cart_and_transient_fields(milk) -> None:
    session = _session(FakeGateway(), milk)

    result = await session.submit()

    assert result.success
    assert session.cart.is_empty()
    assert session.form.address == ""
    assert session.form.comment == ""
    assert session.form.name == "Анна"
    assert session.form.phone == "+79001234567"
    assert not session.submitting


@pytest.mark.asyncio
async def test_failure_keeps_cart_and_form(milk) -> None:
    gateway = FakeGateway(error=SubmitError(SubmitErrorKind.SERVER_REJECTED, "bad token"))
    session = _session(gateway, milk)

    result = await session.submit()

    assert not result.success
    assert session.cart.count() == 1
    assert session.form.address == "ул. Полевая, 5"
    assert not session.submitting

    gateway.error = None
    assert (await session.submit()).success


@pytest.mark.asyncio
async def test_second_submit_while_in_flight_is_refused(milk) -> None:
    gateway = SlowGateway()
    session = _session(gateway, milk)

    first = asyncio.create_task(session.submit())
    await asyncio.sleep(0)
    assert session.submitting

    second = await session.submit()
    assert second.error.kind is SubmitErrorKind.IN_PROGRESS

    gateway.release.set()
    assert (await first).success
    assert len(gateway.payloads) == 1
    assert not session.submitting


@pytest.mark.asyncio
async def test_totals_follow_cart(milk) -> None:
    session = _session(FakeGateway(), milk)
    assert session.totals.grand_total == 700
    assert session.missing_for_free_delivery == 1500

    session.cart.set_quantity("P1", 4)
    assert session.totals.delivery_fee == 0
    assert session.missing_for_free_delivery == 0


@pytest.mark.asyncio
async def test_platform_user_reaches_payload(milk) -> None:
    gateway = FakeGateway()
    session = _session(gateway, milk, PlatformUser(id=99, first_name="Иван"))

    await session.submit()

    assert gateway.payloads[0]["tg"]["id"] == 99


@pytest.mark.asyncio
async def test_context_manager_closes_gateway(milk) -> None:
    gateway = FakeGateway()
    async with _session(gateway, milk) as session:
        assert session.validate() is None
    gateway.close.assert_awaited_once()
