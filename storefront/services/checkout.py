"""Checkout session - one shopper's cart, form and order submission."""
from __future__ import annotations

from decimal import Decimal

from storefront.core.exceptions import CheckoutValidationError, SubmitError, SubmitErrorKind
from storefront.core.order_math import CartTotals, amount_to_free_delivery, calc_totals
from storefront.domain.checkout_rules import validate_checkout
from storefront.domain.order import ANONYMOUS_USER, CheckoutFields, PlatformUser
from storefront.logging_config import logger
from storefront.services.cart import CartStore
from storefront.services.order_service import OrderResult, OrderSubmitter

IN_PROGRESS_MESSAGE = "Заказ уже отправляется, подождите."


class CheckoutSession:
    """Created when the Mini App opens, closed when it goes away.

    After a successful order the cart is cleared and the address and comment
    are reset; name and phone stay filled in for the next order.
    """

    def __init__(
        self,
        cart: CartStore,
        submitter: OrderSubmitter,
        user: PlatformUser = ANONYMOUS_USER,
    ):
        self.cart = cart
        self.submitter = submitter
        self.user = user
        self.form = CheckoutFields()
        self._submitting = False

    async def __aenter__(self) -> CheckoutSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def submitting(self) -> bool:
        """True while an order is in flight; the submit button is disabled."""
        return self._submitting

    @property
    def totals(self) -> CartTotals:
        return calc_totals(self.cart.items(), self.submitter.policy)

    @property
    def missing_for_free_delivery(self) -> Decimal:
        return amount_to_free_delivery(self.totals.subtotal, self.submitter.policy)

    def validate(self) -> CheckoutValidationError | None:
        return validate_checkout(self.form, self.cart)

    async def submit(self) -> OrderResult:
        if self._submitting:
            logger.info("Ignoring duplicate submit while an order is in flight")
            return OrderResult(
                success=False,
                totals=self.totals,
                error=SubmitError(SubmitErrorKind.IN_PROGRESS, IN_PROGRESS_MESSAGE),
            )

        self._submitting = True
        try:
            result = await self.submitter.submit(self.form, self.cart, self.user)
        finally:
            self._submitting = False

        if result.success:
            self.cart.clear()
            self.form.address = ""
            self.form.comment = ""
        return result

    async def close(self) -> None:
        await self.submitter.close()
