"""
Per-entity access to the key-value store.

Views and stores depend on one of these repositories, never on the raw store.
Each repository owns the keys of its entity and their JSON encoding.
"""
import json
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from database import KeyValueStore
from schemas import CartLine, Order, Session

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "authToken"
USER_PHONE_KEY = "userPhone"
IS_LOGGED_IN_KEY = "isLoggedIn"
CART_KEY = "cart"
ORDERS_KEY = "orders"


def _load_list(store: KeyValueStore, key: str) -> List[Any]:
    raw = store.get_item(key)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except ValueError:
        logger.error("Discarding unreadable %s entry", key)
        return []
    if not isinstance(data, list):
        logger.error("Discarding %s entry that is not a list", key)
        return []
    return data


class SessionRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self) -> Optional[Session]:
        token = self.store.get_item(AUTH_TOKEN_KEY)
        phone = self.store.get_item(USER_PHONE_KEY)
        if not token or not phone:
            return None
        return Session(phone=phone, token=token)

    def set(self, session: Session) -> None:
        self.store.set_item(AUTH_TOKEN_KEY, session.token)
        self.store.set_item(USER_PHONE_KEY, session.phone)
        self.store.set_item(IS_LOGGED_IN_KEY, "true")

    def clear(self) -> None:
        for key in (AUTH_TOKEN_KEY, USER_PHONE_KEY, IS_LOGGED_IN_KEY):
            self.store.remove_item(key)


class CartRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self) -> List[CartLine]:
        lines: List[CartLine] = []
        for raw in _load_list(self.store, CART_KEY):
            # lines edited to zero elsewhere are dropped, not rejected
            quantity = raw.get("quantity") if isinstance(raw, dict) else None
            if not isinstance(quantity, int) or quantity <= 0:
                continue
            try:
                lines.append(CartLine.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping invalid cart line %r: %s", raw.get("id"), e)
        return lines

    def set(self, lines: List[CartLine]) -> None:
        payload = [line.model_dump(exclude_none=True) for line in lines]
        self.store.set_item(CART_KEY, json.dumps(payload))

    def clear(self) -> None:
        self.store.remove_item(CART_KEY)


class OrderRepository:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def get(self) -> List[Order]:
        orders: List[Order] = []
        for raw in _load_list(self.store, ORDERS_KEY):
            try:
                orders.append(Order.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping invalid order record: %s", e)
        return orders

    def set(self, orders: List[Order]) -> None:
        payload = [o.model_dump(mode="json", by_alias=True, exclude_none=True) for o in orders]
        self.store.set_item(ORDERS_KEY, json.dumps(payload))

    def clear(self) -> None:
        self.store.remove_item(ORDERS_KEY)
