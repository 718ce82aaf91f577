"""In-memory document stores.

Notes:
- Per-process only; data is lost on restart.
- Thread-safe: sync endpoints run in FastAPI's thread pool, so every table is
  guarded by a lock.
- Documents are copied on the way in and out so callers cannot mutate stored
  state without calling ``save``.
"""

from __future__ import annotations

import threading

from storefront.adapters.store.base import (
    AbstractOrderStore,
    AbstractProductStore,
    AbstractUserStore,
    OrderRecord,
    ProductRecord,
    UserRecord,
)


class InMemoryUserStore(AbstractUserStore):
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_id: dict[str, UserRecord] = {}

    def find_by_email(self, email: str) -> UserRecord | None:
        email = email.strip().lower()
        with self._lock:
            for record in self._by_id.values():
                if record.email == email:
                    return record.model_copy(deep=True)
        return None

    def find_by_id(self, user_id: str) -> UserRecord | None:
        with self._lock:
            record = self._by_id.get(user_id)
            return record.model_copy(deep=True) if record else None

    def create(self, record: UserRecord) -> UserRecord:
        with self._lock:
            if self.find_by_email(record.email) is not None:
                raise ValueError(f"email already registered: {record.email}")
            self._by_id[record.id] = record.model_copy(deep=True)
        return record

    def save(self, record: UserRecord) -> UserRecord:
        with self._lock:
            if record.id not in self._by_id:
                raise KeyError(record.id)
            self._by_id[record.id] = record.model_copy(deep=True)
        return record


class InMemoryProductStore(AbstractProductStore):
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_id: dict[str, ProductRecord] = {}

    def _matching(self, keyword: str | None) -> list[ProductRecord]:
        needle = (keyword or "").strip().lower()
        records = sorted(self._by_id.values(), key=lambda r: r.created_at)
        if not needle:
            return records
        return [r for r in records if needle in r.name.lower()]

    def search(self, keyword: str | None, *, offset: int, limit: int) -> list[ProductRecord]:
        with self._lock:
            page = self._matching(keyword)[offset : offset + limit]
            return [r.model_copy(deep=True) for r in page]

    def count(self, keyword: str | None = None) -> int:
        with self._lock:
            return len(self._matching(keyword))

    def list_featured(self, limit: int) -> list[ProductRecord]:
        with self._lock:
            featured = [r for r in self._by_id.values() if r.is_featured]
            featured.sort(key=lambda r: r.created_at, reverse=True)
            return [r.model_copy(deep=True) for r in featured[:limit]]

    def get(self, product_id: str) -> ProductRecord | None:
        with self._lock:
            record = self._by_id.get(product_id)
            return record.model_copy(deep=True) if record else None

    def save(self, record: ProductRecord) -> ProductRecord:
        with self._lock:
            self._by_id[record.id] = record.model_copy(deep=True)
        return record

    def delete(self, product_id: str) -> bool:
        with self._lock:
            return self._by_id.pop(product_id, None) is not None


class InMemoryOrderStore(AbstractOrderStore):
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_id: dict[str, OrderRecord] = {}

    def get(self, order_id: str) -> OrderRecord | None:
        with self._lock:
            record = self._by_id.get(order_id)
            return record.model_copy(deep=True) if record else None

    def save(self, record: OrderRecord) -> OrderRecord:
        with self._lock:
            self._by_id[record.id] = record.model_copy(deep=True)
        return record

    def list_by_user(self, user_id: str) -> list[OrderRecord]:
        return [r for r in self.list_all() if r.user_id == user_id]

    def list_all(self) -> list[OrderRecord]:
        with self._lock:
            records = sorted(self._by_id.values(), key=lambda r: r.created_at, reverse=True)
            return [r.model_copy(deep=True) for r in records]
