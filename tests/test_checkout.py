"""Tests for totals, payment capabilities and the checkout process."""

import asyncio
import json
import re

import pytest

import catalog
from checkout import (
    DELIVERY_FEE,
    CheckoutProcess,
    CheckoutState,
    PaymentAttempt,
    PaymentWidget,
    RazorpayCheckout,
    compute_totals,
)
from errors import PaymentError, Redirect
from repositories import ORDERS_KEY
from schemas import CartLine, OrderStatus, PaymentMethod


class RecordingWidget(PaymentWidget):
    """Stands in for the external modal; the test decides how it resolves."""

    def __init__(self, outcome="pay_Nx81"):
        self.outcome = outcome
        self.opened = []

    def open(self, options, attempt):
        self.opened.append((options, attempt))
        if self.outcome == "dismiss":
            attempt.dismiss()
        elif self.outcome is not None:
            attempt.succeed(self.outcome)


def line(item_id, quantity):
    return CartLine(**catalog.get_item(item_id).model_dump(), quantity=quantity)


@pytest.fixture
def filled_cart(cart_store, dosa, coffee):
    cart_store.add_item(dosa)
    cart_store.add_item(dosa)
    cart_store.add_item(coffee)
    return cart_store


@pytest.fixture
def process(filled_cart, order_log, capabilities, clock):
    checkout = CheckoutProcess(filled_cart, order_log, capabilities, clock=clock)
    checkout.enter()
    return checkout


class TestTotals:
    def test_worked_example(self):
        totals = compute_totals([line(1, 2), line(4, 1)])

        assert totals.subtotal == 105
        assert totals.tax == 5
        assert totals.delivery_fee == 40
        assert totals.total == 150

    def test_tax_rounds_half_up(self):
        # 50 * 5% = 2.5
        assert compute_totals([line(9, 1)]).tax == 3

    @pytest.mark.parametrize("quantities", [[1], [3, 2], [7, 1, 4]])
    def test_total_formula(self, quantities):
        lines = [line(item_id, qty) for item_id, qty in zip([6, 7, 8], quantities)]
        totals = compute_totals(lines)

        assert totals.total == totals.subtotal + DELIVERY_FEE + round(totals.subtotal * 0.05 + 1e-9)


class TestCheckoutProcess:
    def test_enter_with_empty_cart_redirects(self, cart_store, order_log, capabilities):
        checkout = CheckoutProcess(cart_store, order_log, capabilities)

        with pytest.raises(Redirect) as exc:
            checkout.enter()
        assert exc.value.to == "/menu"
        assert not checkout.can_pay

    def test_cash_on_delivery_creates_pending_order(self, process, filled_cart, order_log):
        process.select_method(PaymentMethod.COD)
        order = asyncio.run(process.pay())

        assert order.status == OrderStatus.PENDING
        assert order.payment_method == "Cash on Delivery"
        assert re.fullmatch(r"COD-\d+", order.payment_id)
        assert (order.subtotal, order.delivery_fee, order.tax, order.total) == (105, 40, 5, 150)
        assert filled_cart.is_empty()
        assert len(order_log) == 1
        assert process.state == CheckoutState.ORDER_CREATED
        assert process.redirect_to == "/orders"

    def test_upi_creates_completed_order(self, process):
        process.select_method(PaymentMethod.UPI)
        order = asyncio.run(process.pay())

        assert order.status == OrderStatus.COMPLETED
        assert order.payment_method == "UPI Payment"
        assert order.payment_id.startswith("UPI-")

    def test_order_dates(self, process):
        process.select_method(PaymentMethod.UPI)
        order = asyncio.run(process.pay())

        assert order.model_dump(mode="json", by_alias=True)["timestamp"] == "2026-10-19T10:30:15.123Z"
        assert re.fullmatch(r"\d{2} [A-Z][a-z]{2} \d{4}, \d{2}:\d{2} (am|pm)", order.date)

    def test_defaults_to_an_available_method(self, process):
        assert process.method == PaymentMethod.UPI
        assert process.can_pay

    def test_unavailable_method_cannot_pay(self, process, order_log):
        with pytest.raises(PaymentError):
            process.select_method(PaymentMethod.RAZORPAY)

        process.method = PaymentMethod.RAZORPAY
        assert not process.can_pay
        assert asyncio.run(process.pay()) is None
        assert len(order_log) == 0

    def test_razorpay_success(self, filled_cart, order_log, capabilities, clock):
        widget = RecordingWidget("pay_Nx81")
        capabilities[PaymentMethod.RAZORPAY] = RazorpayCheckout(widget, "rzp_test_key")
        checkout = CheckoutProcess(filled_cart, order_log, capabilities, clock=clock)
        checkout.enter()

        order = asyncio.run(checkout.pay())

        options, _ = widget.opened[0]
        assert options["amount"] == 150 * 100
        assert options["currency"] == "INR"
        assert options["key"] == "rzp_test_key"
        assert order.payment_id == "pay_Nx81"
        assert order.payment_method == "Razorpay"
        assert order.status == OrderStatus.COMPLETED

    def test_razorpay_dismissal_returns_to_idle(self, filled_cart, order_log, capabilities, clock):
        widget = RecordingWidget("dismiss")
        capabilities[PaymentMethod.RAZORPAY] = RazorpayCheckout(widget, "rzp_test_key")
        checkout = CheckoutProcess(filled_cart, order_log, capabilities, clock=clock)
        checkout.enter()

        assert asyncio.run(checkout.pay()) is None

        assert checkout.state == CheckoutState.IDLE
        assert checkout.can_pay
        assert len(order_log) == 0
        assert filled_cart.count() == 3

    def test_second_pay_while_in_flight_is_ignored(self, filled_cart, order_log, capabilities, clock):
        widget = RecordingWidget(outcome=None)
        capabilities[PaymentMethod.RAZORPAY] = RazorpayCheckout(widget, "rzp_test_key")
        checkout = CheckoutProcess(filled_cart, order_log, capabilities, clock=clock)
        checkout.enter()

        async def scenario():
            first = asyncio.create_task(checkout.pay())
            await asyncio.sleep(0)
            assert checkout.in_flight
            assert not checkout.can_pay
            second = await checkout.pay()
            _, attempt = widget.opened[0]
            attempt.succeed("pay_once")
            return await first, second

        order, second = asyncio.run(scenario())

        assert second is None
        assert len(widget.opened) == 1
        assert order.payment_id == "pay_once"
        assert len(order_log) == 1

    def test_order_items_are_a_snapshot(self, process, cart_store, dosa):
        process.select_method(PaymentMethod.UPI)
        order = asyncio.run(process.pay())

        cart_store.add_item(dosa)
        cart_store.change_quantity(dosa.id, 5)

        assert [(item.id, item.quantity) for item in order.items] == [(1, 2), (4, 1)]

    def test_order_is_terminal(self, process):
        process.select_method(PaymentMethod.COD)
        asyncio.run(process.pay())

        with pytest.raises(PaymentError):
            asyncio.run(process.pay())
        with pytest.raises(PaymentError):
            process.select_method(PaymentMethod.UPI)

    def test_order_ids_stay_unique_for_same_instant(self, cart_store, order_log, capabilities, clock, dosa):
        ids = []
        for _ in range(2):
            cart_store.add_item(dosa)
            checkout = CheckoutProcess(cart_store, order_log, capabilities, clock=clock)
            checkout.enter()
            checkout.select_method(PaymentMethod.UPI)
            ids.append(asyncio.run(checkout.pay()).id)

        assert ids[1] == ids[0] + 1

    def test_order_is_persisted_with_camel_case_keys(self, store, process):
        process.select_method(PaymentMethod.COD)
        asyncio.run(process.pay())

        stored = json.loads(store.get_item(ORDERS_KEY))[0]
        assert stored["deliveryFee"] == 40
        assert stored["paymentMethod"] == "Cash on Delivery"
        assert stored["paymentId"].startswith("COD-")
        assert stored["status"] == "Pending"
        assert stored["items"][0]["quantity"] == 2


class TestPaymentAttempt:
    def test_resolves_only_once(self):
        async def scenario():
            attempt = PaymentAttempt()
            attempt.succeed("pay_1")
            with pytest.raises(PaymentError):
                attempt.dismiss()
            with pytest.raises(PaymentError):
                attempt.succeed("pay_2")
            return await attempt.wait()

        assert asyncio.run(scenario()) == "pay_1"

    def test_dismiss_yields_none(self):
        async def scenario():
            attempt = PaymentAttempt()
            attempt.dismiss()
            return attempt.resolved, await attempt.wait()

        assert asyncio.run(scenario()) == (True, None)
