from typing import Dict, List, Optional

from repositories import OrderRepository
from schemas import Order, OrderStatus


HISTORY_FILTERS = ["all", "completed", "pending", "cancelled"]


class OrderLog:
    """Append-only history of placed orders."""

    def __init__(self, repository: OrderRepository):
        self.repository = repository

    def append(self, order: Order) -> Order:
        orders = self.repository.get()
        orders.append(order)
        self.repository.set(orders)
        return order

    def list_orders(self) -> List[Order]:
        """All orders, newest first."""
        return sorted(self.repository.get(), key=lambda o: o.timestamp, reverse=True)

    def filter_orders(self, status: str = "all") -> List[Order]:
        orders = self.list_orders()
        if status.lower() == "all":
            return orders
        return [o for o in orders if o.status.value.lower() == status.lower()]

    def get(self, order_id: int) -> Optional[Order]:
        return next((o for o in self.repository.get() if o.id == order_id), None)

    def latest_id(self) -> int:
        return max((o.id for o in self.repository.get()), default=0)

    def status_counts(self) -> Dict[str, int]:
        orders = self.repository.get()
        counts = {"all": len(orders)}
        for name in HISTORY_FILTERS[1:]:
            counts[name] = sum(1 for o in orders if o.status.value.lower() == name)
        return counts

    def pending_count(self) -> int:
        return sum(1 for o in self.repository.get() if o.status == OrderStatus.PENDING)

    def __len__(self) -> int:
        return len(self.repository.get())
