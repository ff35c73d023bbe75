import logging
from typing import List

from repositories import CartRepository
from schemas import CartLine, CatalogItem

logger = logging.getLogger(__name__)


class CartStore:
    """
    The cart: at most one line per item id, every mutation written through.

    The in-memory copy can go stale when storage is changed elsewhere (another
    view, another tab); callers ``reload()`` on focus and on route changes.
    """

    def __init__(self, repository: CartRepository):
        self.repository = repository
        self._lines: List[CartLine] = repository.get()

    def reload(self) -> List[CartLine]:
        self._lines = self.repository.get()
        logger.debug("Cart loaded: %d lines", len(self._lines))
        return self.lines()

    def _save(self, lines: List[CartLine]) -> List[CartLine]:
        self._lines = lines
        self.repository.set(lines)
        return self.lines()

    def lines(self) -> List[CartLine]:
        return [line.model_copy(deep=True) for line in self._lines]

    def add_item(self, item: CatalogItem) -> List[CartLine]:
        if any(line.id == item.id for line in self._lines):
            lines = [
                line.model_copy(update={"quantity": line.quantity + 1}) if line.id == item.id else line
                for line in self._lines
            ]
        else:
            lines = self._lines + [CartLine(**item.model_dump(), quantity=1)]
        return self._save(lines)

    def change_quantity(self, item_id: int, delta: int) -> List[CartLine]:
        lines = [
            line.model_copy(update={"quantity": max(1, line.quantity + delta)}) if line.id == item_id else line
            for line in self._lines
        ]
        return self._save([line for line in lines if line.quantity > 0])

    def remove_line(self, item_id: int) -> List[CartLine]:
        """Drop the line whatever its quantity."""
        return self._save([line for line in self._lines if line.id != item_id])

    def decrement_or_remove_line(self, item_id: int) -> List[CartLine]:
        """Take one unit off the line, dropping it when it was the last."""
        existing = next((line for line in self._lines if line.id == item_id), None)
        if existing is not None and existing.quantity > 1:
            lines = [
                line.model_copy(update={"quantity": line.quantity - 1}) if line.id == item_id else line
                for line in self._lines
            ]
            return self._save(lines)
        return self.remove_line(item_id)

    def quantity_of(self, item_id: int) -> int:
        return next((line.quantity for line in self._lines if line.id == item_id), 0)

    def total(self) -> int:
        return sum(line.line_total for line in self._lines)

    def count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def length(self) -> int:
        return len(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def clear(self) -> None:
        self._lines = []
        self.repository.clear()
