"""Shared pytest fixtures for the canteen portal tests."""

from datetime import datetime, timezone

import httpx
import pytest

import catalog
from auth_api import AuthAPI
from cart import CartStore
from checkout import default_capabilities
from database import MemoryStore
from orders import OrderLog
from repositories import CartRepository, OrderRepository, SessionRepository
from session import SessionStore


FIXED_NOW = datetime(2026, 10, 19, 10, 30, 15, 123000, tzinfo=timezone.utc)


@pytest.fixture
def store():
    """An empty in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def session_store(store):
    return SessionStore(SessionRepository(store))


@pytest.fixture
def cart_store(store):
    return CartStore(CartRepository(store))


@pytest.fixture
def order_log(store):
    return OrderLog(OrderRepository(store))


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def capabilities(clock):
    """Local payment capabilities without the simulated latency."""
    return default_capabilities(clock=clock, cod_delay=0, upi_delay=0)


@pytest.fixture
def dosa():
    return catalog.get_item(1)


@pytest.fixture
def coffee():
    return catalog.get_item(4)


@pytest.fixture
def make_auth_api():
    """Build an AuthAPI whose requests are answered by ``handler(request)``."""

    def factory(handler):
        return AuthAPI("http://auth.test/api/auth", transport=httpx.MockTransport(handler))

    return factory
