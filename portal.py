"""
The student portal: one user's session, cart and orders over a key-value store.

Routes map to the portal's views. Every route except the login pair checks the
session before it is shown; the cart is re-read whenever a view that shows it
is entered and whenever the window regains focus.
"""
import logging
from typing import Dict, List, Optional

import catalog
from auth_api import AuthAPI
from cart import CartStore
from checkout import CheckoutProcess, PaymentCapability, PaymentWidget, default_capabilities
from config import Settings, get_settings
from database import KeyValueStore, get_store
from errors import Redirect
from login_flow import LoginForm, OtpForm
from orders import OrderLog
from repositories import CartRepository, OrderRepository, SessionRepository
from schemas import CatalogItem, PaymentMethod
from session import SessionStore

logger = logging.getLogger(__name__)

PUBLIC_ROUTES = {"/login", "/otp-verification"}
PROTECTED_ROUTES = {"/dashboard", "/menu", "/cart", "/payment", "/orders"}
CART_ROUTES = {"/menu", "/cart", "/payment"}


class StudentPortal:
    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        api: Optional[AuthAPI] = None,
        capabilities: Optional[Dict[PaymentMethod, PaymentCapability]] = None,
        widget: Optional[PaymentWidget] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store if store is not None else get_store()
        self.api = api or AuthAPI(self.settings.auth_api_url)
        self.session = SessionStore(SessionRepository(self.store))
        self.cart = CartStore(CartRepository(self.store))
        self.orders = OrderLog(OrderRepository(self.store))
        if capabilities is None:
            capabilities = default_capabilities(widget, key_id=self.settings.razorpay_key_id)
        self.capabilities = capabilities
        self.route = "/login"
        self.checkout: Optional[CheckoutProcess] = None

    # ---------- Navigation ----------
    def navigate(self, path: str) -> str:
        """Enter ``path``; returns the route actually shown."""
        try:
            self._enter(path)
        except Redirect as r:
            logger.info("Redirecting %s -> %s (%s)", path, r.to, r.reason)
            if r.to == path:
                raise
            return self.navigate(r.to)
        self.route = path
        return path

    def _enter(self, path: str) -> None:
        if path in PUBLIC_ROUTES:
            return
        if path not in PROTECTED_ROUTES:
            raise Redirect("/dashboard" if self.session.is_authenticated() else "/login", f"unknown route {path}")
        self.session.require()
        if path in CART_ROUTES:
            self.cart.reload()
        if path == "/payment":
            checkout = CheckoutProcess(self.cart, self.orders, self.capabilities)
            checkout.enter()
            self.checkout = checkout

    def on_focus(self) -> None:
        self.cart.reload()

    def logout(self) -> str:
        self.session.logout()
        self.checkout = None
        self.route = "/login"
        return self.route

    # ---------- Views ----------
    def login_form(self) -> LoginForm:
        return LoginForm(self.api, self.settings.default_country_code)

    def otp_form(self, phone: Optional[str]) -> OtpForm:
        return OtpForm(self.api, self.session, phone)

    def menu(self, search_term: str = "", category: str = "All") -> List[CatalogItem]:
        return catalog.filter_items(search_term, category)

    def dashboard_stats(self) -> Dict[str, int]:
        return {
            "available_items": len(catalog.list_items()),
            "cart_items": self.cart.count(),
            "total_orders": len(self.orders),
            "pending": self.orders.pending_count(),
        }
