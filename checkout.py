"""
Checkout and payment.

A ``CheckoutProcess`` is one attempt to pay for the current cart. It snapshots
the cart on entry, hands the total to the payment capability for the chosen
method and, once the capability returns a payment reference, writes exactly
one ``Order`` to the log and empties the cart.

Cash on delivery and direct UPI are settled locally. The Razorpay checkout is
an external modal: it is given a ``PaymentAttempt`` and calls back either
``succeed(payment_id)`` or ``dismiss()``, once.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from cart import CartStore
from errors import PaymentError, Redirect
from orders import OrderLog
from schemas import CartLine, Order, OrderStatus, PaymentMethod, epoch_ms, utcnow

logger = logging.getLogger(__name__)

DELIVERY_FEE = 40
TAX_RATE = Decimal("0.05")
CURRENCY = "INR"
MERCHANT_NAME = "Student Canteen"
DEFAULT_PREFILL = {
    "name": "Student",
    "email": "student@example.com",
    "contact": "9999999999",
}

Clock = Callable[[], datetime]


def format_order_date(moment: datetime) -> str:
    """``19 Oct 2026, 04:05 pm`` in local time."""
    text = moment.astimezone().strftime("%d %b %Y, %I:%M %p")
    return text[:-2] + text[-2:].lower()


@dataclass(frozen=True)
class Totals:
    subtotal: int
    delivery_fee: int
    tax: int
    total: int


def compute_totals(lines: List[CartLine], delivery_fee: int = DELIVERY_FEE) -> Totals:
    subtotal = sum(line.line_total for line in lines)
    tax = int((Decimal(subtotal) * TAX_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return Totals(subtotal=subtotal, delivery_fee=delivery_fee, tax=tax, total=subtotal + delivery_fee + tax)


# ------------ Payment capabilities -------------
@dataclass(frozen=True)
class PaymentResult:
    payment_id: str
    status: OrderStatus


class PaymentAttempt:
    """Resolved once by an external payment widget: success or dismissal."""

    def __init__(self):
        self._future: "asyncio.Future[Optional[str]]" = asyncio.get_running_loop().create_future()

    @property
    def resolved(self) -> bool:
        return self._future.done()

    def succeed(self, payment_id: str) -> None:
        if self._future.done():
            raise PaymentError("Payment attempt already resolved")
        self._future.set_result(payment_id)

    def dismiss(self) -> None:
        if self._future.done():
            raise PaymentError("Payment attempt already resolved")
        self._future.set_result(None)

    async def wait(self) -> Optional[str]:
        return await self._future


class PaymentCapability:
    async def collect(self, totals: Totals) -> Optional[PaymentResult]:
        """Return a payment reference, or None when the payer backs out."""
        raise NotImplementedError


class LocalPayment(PaymentCapability):
    """Settled without a provider; the reference is ``<prefix>-<epoch ms>``."""

    def __init__(self, prefix: str, status: OrderStatus, delay: float = 0.0, clock: Clock = utcnow):
        self.prefix = prefix
        self.status = status
        self.delay = delay
        self.clock = clock

    async def collect(self, totals: Totals) -> Optional[PaymentResult]:
        if self.delay:
            await asyncio.sleep(self.delay)
        return PaymentResult(f"{self.prefix}-{epoch_ms(self.clock())}", self.status)


class PaymentWidget:
    """The external checkout modal."""

    def open(self, options: Dict[str, Any], attempt: PaymentAttempt) -> None:
        raise NotImplementedError


class RazorpayCheckout(PaymentCapability):
    def __init__(self, widget: PaymentWidget, key_id: str, prefill: Optional[Dict[str, str]] = None):
        self.widget = widget
        self.key_id = key_id
        self.prefill = dict(prefill or DEFAULT_PREFILL)

    def options(self, totals: Totals) -> Dict[str, Any]:
        return {
            "key": self.key_id,
            "amount": totals.total * 100,
            "currency": CURRENCY,
            "name": MERCHANT_NAME,
            "description": "Order Payment",
            "prefill": dict(self.prefill),
        }

    async def collect(self, totals: Totals) -> Optional[PaymentResult]:
        attempt = PaymentAttempt()
        self.widget.open(self.options(totals), attempt)
        payment_id = await attempt.wait()
        if payment_id is None:
            return None
        return PaymentResult(payment_id, OrderStatus.COMPLETED)


def default_capabilities(
    widget: Optional[PaymentWidget] = None,
    key_id: str = "",
    clock: Clock = utcnow,
    cod_delay: float = 1.0,
    upi_delay: float = 1.5,
) -> Dict[PaymentMethod, PaymentCapability]:
    capabilities: Dict[PaymentMethod, PaymentCapability] = {
        PaymentMethod.COD: LocalPayment("COD", OrderStatus.PENDING, cod_delay, clock),
        PaymentMethod.UPI: LocalPayment("UPI", OrderStatus.COMPLETED, upi_delay, clock),
    }
    if widget is not None:
        capabilities[PaymentMethod.RAZORPAY] = RazorpayCheckout(widget, key_id)
    return capabilities


# ------------ Checkout -------------
METHOD_PREFERENCE = [PaymentMethod.RAZORPAY, PaymentMethod.UPI, PaymentMethod.COD]


class CheckoutState(str, Enum):
    IDLE = "idle"
    AWAITING_PAYMENT = "awaiting_payment"
    ORDER_CREATED = "order_created"


class CheckoutProcess:
    def __init__(
        self,
        cart: CartStore,
        order_log: OrderLog,
        capabilities: Dict[PaymentMethod, PaymentCapability],
        clock: Clock = utcnow,
    ):
        self.cart = cart
        self.order_log = order_log
        self.capabilities = capabilities
        self.clock = clock
        self.state = CheckoutState.IDLE
        self.method = next((m for m in METHOD_PREFERENCE if m in capabilities), PaymentMethod.RAZORPAY)
        self.items: List[CartLine] = []
        self.order: Optional[Order] = None
        self.redirect_to: Optional[str] = None
        self._entered = False

    @property
    def in_flight(self) -> bool:
        return self.state == CheckoutState.AWAITING_PAYMENT

    @property
    def totals(self) -> Totals:
        return compute_totals(self.items)

    @property
    def can_pay(self) -> bool:
        return (
            self._entered
            and self.state == CheckoutState.IDLE
            and self.method in self.capabilities
            and self.totals.total > 0
        )

    def enter(self) -> List[CartLine]:
        self.items = self.cart.reload()
        if not self.items:
            raise Redirect("/menu", "Cart is empty")
        self._entered = True
        return [line.model_copy(deep=True) for line in self.items]

    def select_method(self, method: PaymentMethod) -> None:
        if self.state != CheckoutState.IDLE:
            raise PaymentError(f"Cannot change payment method while {self.state.value}")
        method = PaymentMethod(method)
        if method not in self.capabilities:
            raise PaymentError(f"Payment method {method.value} is not available")
        self.method = method

    async def pay(self) -> Optional[Order]:
        if self.state == CheckoutState.ORDER_CREATED:
            raise PaymentError("Order already placed for this checkout")
        if not self.can_pay:
            logger.debug("Pay ignored: state=%s total=%s", self.state.value, self.totals.total)
            return None
        capability = self.capabilities[self.method]

        totals = self.totals
        self.state = CheckoutState.AWAITING_PAYMENT
        result = None
        try:
            result = await capability.collect(totals)
        finally:
            if result is None:
                self.state = CheckoutState.IDLE

        if result is None:
            logger.info("Payment via %s dismissed", self.method.label)
            return None
        return self._create_order(result, totals)

    def _create_order(self, result: PaymentResult, totals: Totals) -> Order:
        now = self.clock()
        order = Order(
            id=max(epoch_ms(now), self.order_log.latest_id() + 1),
            items=[line.model_copy(deep=True) for line in self.items],
            subtotal=totals.subtotal,
            delivery_fee=totals.delivery_fee,
            tax=totals.tax,
            total=totals.total,
            date=format_order_date(now),
            timestamp=now,
            payment_id=result.payment_id,
            payment_method=self.method.label,
            status=result.status,
        )
        self.order_log.append(order)
        self.cart.clear()
        self.order = order
        self.state = CheckoutState.ORDER_CREATED
        self.redirect_to = "/orders"
        logger.info("Order %s placed: total=%s payment=%s", order.id, order.total, order.payment_id)
        return order
