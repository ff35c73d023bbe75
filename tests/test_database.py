"""Tests for the key-value stores and repositories."""

import json

from database import MemoryStore, MongoStore, get_store
from orders import OrderLog
from repositories import CART_KEY, ORDERS_KEY, CartRepository, OrderRepository, SessionRepository
from schemas import Session


class FakeCollection:
    """The subset of pymongo's Collection used by MongoStore."""

    def __init__(self):
        self.docs = {}

    def find_one(self, query):
        return self.docs.get(query["_id"])

    def replace_one(self, query, doc, upsert=False):
        if query["_id"] in self.docs or upsert:
            self.docs[query["_id"]] = doc

    def delete_one(self, query):
        self.docs.pop(query["_id"], None)


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


def test_memory_store_round_trip():
    store = MemoryStore()
    store.set_item("cart", "[]")

    assert store.get_item("cart") == "[]"
    store.remove_item("cart")
    store.remove_item("cart")
    assert store.get_item("cart") is None


def test_mongo_store_keeps_one_document_per_key():
    collection = FakeCollection()
    store = MongoStore(collection)

    store.set_item("authToken", "abc")
    store.set_item("authToken", "def")

    assert collection.docs == {"authToken": {"_id": "authToken", "value": "def"}}
    assert store.get_item("authToken") == "def"
    store.remove_item("authToken")
    assert store.get_item("authToken") is None


def test_get_store_uses_given_database():
    database = FakeDatabase()
    store = get_store(database)
    store.set_item("userPhone", "+919876543210")

    assert isinstance(store, MongoStore)
    assert database["kv"].docs["userPhone"]["value"] == "+919876543210"


def test_session_repository_set_and_clear():
    store = MemoryStore()
    repo = SessionRepository(store)

    repo.set(Session(phone="+919876543210", token="t"))
    assert repo.get() == Session(phone="+919876543210", token="t")

    repo.clear()
    assert repo.get() is None
    assert store.keys() == []


def test_cart_repository_skips_invalid_lines():
    store = MemoryStore()
    store.set_item(
        CART_KEY,
        json.dumps([
            {"id": 4, "name": "Coffee", "price": 15, "category": "Beverages", "quantity": 2},
            {"id": 99, "name": "Mystery", "price": -5, "category": "Beverages", "quantity": 1},
            "garbage",
        ]),
    )

    lines = CartRepository(store).get()

    assert [(line.id, line.quantity) for line in lines] == [(4, 2)]


def test_order_repository_ignores_non_list_payload():
    store = MemoryStore({ORDERS_KEY: json.dumps({"id": 1})})

    assert OrderRepository(store).get() == []


def test_order_with_unreadable_timestamp_is_skipped():
    order = {
        "id": 1760869815123,
        "items": [],
        "subtotal": 0,
        "deliveryFee": 40,
        "tax": 0,
        "total": 40,
        "date": "19 Oct 2026, 04:00 pm",
        "timestamp": "2026-10-19T10:30:15.123Z",
        "paymentId": "COD-1760869815123",
        "paymentMethod": "Cash on Delivery",
        "status": "Pending",
    }
    broken = dict(order, id=2, timestamp="not-a-date")
    store = MemoryStore({ORDERS_KEY: json.dumps([order, broken])})

    orders = OrderLog(OrderRepository(store)).list_orders()

    assert [o.id for o in orders] == [1760869815123]
    assert orders[0].timestamp.tzinfo is not None
