from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional

from taskmarket.db.firebase_ops import DataAccessError, DuplicateRecordError
from taskmarket.models.schemas import COMMENTS, TASKS, USER_PROFILES

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _matches(row: Mapping[str, Any], filters: Optional[Mapping[str, Any]]) -> bool:
    return all(row.get(field) == value for field, value in (filters or {}).items())


class FakeRecordStore:
    """
    In-memory record store with the same interface as FirestoreRecordStore.

    - Records every call in ``calls`` as (operation, collection)
    - ``fail_on`` holds (operation, collection) pairs that raise DataAccessError
    - Each insert advances a fake clock by one minute so ordering is deterministic
    """

    def __init__(self):
        self.collections: Dict[str, List[Dict[str, Any]]] = {}
        self.documents: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.fail_on: set = set()
        self._ids: Dict[str, int] = {}
        self._keys: Dict[str, Dict[str, int]] = {}
        self._ticks = 0

    def _record(self, operation: str, collection: str) -> None:
        self.calls.append((operation, collection))
        if (operation, collection) in self.fail_on:
            raise DataAccessError(operation, collection, "simulated outage")

    def _now(self) -> datetime:
        self._ticks += 1
        return BASE_TIME + timedelta(minutes=self._ticks)

    def rows(self, collection: str) -> List[Dict[str, Any]]:
        return self.collections.setdefault(collection, [])

    # Record store interface

    def find_one(self, collection, filters):
        self._record("find_one", collection)
        return next((dict(r) for r in self.rows(collection) if _matches(r, filters)), None)

    def find_many(self, collection, filters=None, order_by=None, descending=False, limit=None):
        self._record("find_many", collection)
        found = [dict(r) for r in self.rows(collection) if _matches(r, filters)]
        if order_by:
            found.sort(key=lambda r: r[order_by], reverse=descending)
        return found[:limit] if limit else found

    def get_by_id(self, collection, record_id):
        self._record("get_by_id", collection)
        return next((dict(r) for r in self.rows(collection) if r["id"] == record_id), None)

    def insert_one(self, collection, values, key=None):
        self._record("insert_one", collection)
        keys = self._keys.setdefault(collection, {})
        if key is not None and any(r["id"] == keys.get(key) for r in self.rows(collection)):
            raise DuplicateRecordError("insert", collection, f"document {key!r} already exists")
        self._ids[collection] = self._ids.get(collection, 0) + 1
        if key is not None:
            keys[key] = self._ids[collection]
        now = self._now()
        row = {k: v.isoformat() if isinstance(v, date) and not isinstance(v, datetime) else v for k, v in dict(values).items()}
        row.setdefault("created_at", now)
        row.update(id=self._ids[collection], updated_at=now)
        self.rows(collection).append(row)
        return dict(row)

    def update_where(self, collection, filters, updates):
        self._record("update_where", collection)
        touched = [r for r in self.rows(collection) if _matches(r, filters)]
        for row in touched:
            row.update(dict(updates), updated_at=self._now())
        return len(touched)

    def delete_where(self, collection, filters):
        self._record("delete_where", collection)
        kept = [r for r in self.rows(collection) if not _matches(r, filters)]
        deleted = len(self.rows(collection)) - len(kept)
        self.collections[collection] = kept
        return deleted

    def get_document(self, collection, document_id):
        self._record("get_document", collection)
        doc = self.documents.get(collection, {}).get(document_id)
        return dict(doc) if doc is not None else None

    def set_document(self, collection, document_id, values):
        self._record("set_document", collection)
        data = dict(values)
        data.setdefault("created_at", self._now())
        self.documents.setdefault(collection, {})[document_id] = data
        return dict(data)

    def delete_document(self, collection, document_id):
        self._record("delete_document", collection)
        self.documents.get(collection, {}).pop(document_id, None)

    def list_documents(self, collection):
        self._record("list_documents", collection)
        return [{"document_id": k, **v} for k, v in self.documents.get(collection, {}).items()]

    # Seeding helpers

    def add_task(self, user_id: str, **overrides) -> Dict[str, Any]:
        values = {
            "title": "Logo design",
            "description": "Need a logo for a campus club",
            "price": 500.0,
            "deadline": "2030-01-01",
            "category": "Design",
            "user_id": user_id,
            "user_name": user_id.capitalize(),
        }
        values.update(overrides)
        return self.insert_one(TASKS, values)

    def add_comment(self, task_id: int, user_id: str, content: str = "I can do this") -> Dict[str, Any]:
        return self.insert_one(COMMENTS, {
            "task_id": task_id,
            "user_id": user_id,
            "user_name": user_id.capitalize(),
            "content": content,
        })

    def add_profile(self, user_id: str, full_name: str = "Ana", **overrides) -> Dict[str, Any]:
        values = {
            "user_id": user_id,
            "full_name": full_name,
            "email": f"{user_id}@example.com",
            "skills": ["Python"],
        }
        values.update(overrides)
        return self.insert_one(USER_PROFILES, values, key=user_id)
