import json
import logging
import os
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core.exceptions import AlreadyExists, GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud.firestore_v1.base_query import FieldFilter
from pydantic import BaseModel as PydanticBaseModel

from taskmarket.core.config import get_settings

logger = logging.getLogger(__name__)

# Firestore rejects batches larger than this.
MAX_BATCH_SIZE = 500

COUNTERS_COLLECTION = "counters"


class DataAccessError(Exception):
    """The record store could not be reached or rejected the request.

    Distinct from an empty result: a query that matches nothing returns
    ``None`` or ``[]`` and never raises.
    """

    def __init__(self, operation: str, collection: str, cause: Any = None):
        self.operation = operation
        self.collection = collection
        self.cause = cause
        message = f"{operation} on '{collection}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class DuplicateRecordError(DataAccessError):
    """A keyed insert found a document already stored under that key."""


def _load_options(settings) -> Optional[Dict[str, Any]]:
    project_id = settings.firebase_project_id
    if not project_id and os.path.exists(settings.firebase_config_path):
        with open(settings.firebase_config_path, "r") as f:
            project_id = json.load(f).get("projectId")
        logger.info("Found Firebase project ID %s in %s", project_id, settings.firebase_config_path)
    return {"projectId": project_id} if project_id else None


def _load_credentials(settings):
    if os.path.exists(settings.firebase_credentials_path):
        logger.info("Initializing Firebase with service account key %s", settings.firebase_credentials_path)
        return credentials.Certificate(settings.firebase_credentials_path)
    logger.info("Initializing Firebase with application default credentials")
    return credentials.ApplicationDefault()


class FirebaseManager:
    """
    Firebase Firestore Manager for handling the client lifecycle
    """
    _instance = None
    _db = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(FirebaseManager, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if self._db is None:
            self.initialize_firebase()

    def initialize_firebase(self):
        """Initialize Firebase Admin SDK. On failure the client stays unset and queries raise DataAccessError."""
        settings = get_settings()
        try:
            app = firebase_admin.get_app()
            logger.debug("Using existing Firebase app")
        except ValueError:
            app = None  # App doesn't exist, so we need to initialize it

        try:
            if app is None:
                app = firebase_admin.initialize_app(_load_credentials(settings), _load_options(settings))
            self._db = firestore.client(app)
        except (ValueError, OSError, GoogleAuthError, GoogleAPIError) as e:
            logger.error("Could not initialize Firebase: %s", e)
            return
        logger.info("Firebase Firestore client initialized")

    def get_db(self):
        """Get Firestore database client"""
        if self._db is None:
            logger.warning("Firestore client accessed before initialization or initialization failed")
        return self._db


def _apply_filters(query, filters: Optional[Mapping[str, Any]]):
    for field, value in (filters or {}).items():
        query = query.where(filter=FieldFilter(field, "==", value))
    return query


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FirestoreRecordStore:
    """
    Record store over Firestore collections.

    Rows are plain dicts. Every row carries a numeric ``id`` field that is
    also its document id. Filters are equality-only and combine with AND.
    """

    def __init__(self, db=None):
        self.db = db if db is not None else FirebaseManager().get_db()

    def _require_db(self, operation: str, collection: str):
        if self.db is None:
            raise DataAccessError(operation, collection, "database not initialized")
        return self.db

    def _prepare_data_for_firestore(self, data_model: Any) -> Dict[str, Any]:
        """Converts Pydantic model or dict to Firestore-compatible dict."""
        if isinstance(data_model, PydanticBaseModel):
            data = data_model.model_dump(exclude_unset=True)
        elif isinstance(data_model, Mapping):
            data = dict(data_model)
        else:
            raise ValueError("Data must be a Pydantic model or a dictionary.")

        # Firestore stores datetimes natively but has no plain date type.
        for key, value in data.items():
            if isinstance(value, date) and not isinstance(value, datetime):
                data[key] = value.isoformat()
        return data

    def _next_id(self, collection: str) -> int:
        db = self._require_db("allocate id", collection)
        counter_ref = db.collection(COUNTERS_COLLECTION).document(collection)

        @firestore.transactional
        def allocate(transaction):
            snapshot = counter_ref.get(transaction=transaction)
            current = (snapshot.to_dict() or {}).get("value", 0) if snapshot.exists else 0
            transaction.set(counter_ref, {"value": current + 1})
            return current + 1

        try:
            return allocate(db.transaction())
        except GoogleAPIError as e:
            raise DataAccessError("allocate id", collection, e) from e

    def find_one(self, collection: str, filters: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Return the first row matching ``filters`` or None when nothing matches."""
        rows = self.find_many(collection, filters, limit=1)
        return rows[0] if rows else None

    def find_many(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        db = self._require_db("query", collection)
        query = _apply_filters(db.collection(collection), filters)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if limit:
            query = query.limit(limit)

        try:
            return [doc.to_dict() for doc in query.stream()]
        except GoogleAPIError as e:
            raise DataAccessError("query", collection, e) from e

    def get_by_id(self, collection: str, record_id: int) -> Optional[Dict[str, Any]]:
        return self.get_document(collection, str(record_id))

    def insert_one(self, collection: str, values: Any, key: Optional[str] = None) -> Dict[str, Any]:
        """
        Insert a row, assigning ``id``, ``created_at`` and ``updated_at``.

        The document id is ``str(id)`` unless ``key`` is given. A keyed insert
        is create-only and raises DuplicateRecordError when the key is taken.
        """
        data = self._prepare_data_for_firestore(values)
        now = _utcnow()
        data["id"] = self._next_id(collection)
        data.setdefault("created_at", now)
        data["updated_at"] = now

        db = self._require_db("insert", collection)
        doc_ref = db.collection(collection).document(key if key is not None else str(data["id"]))
        try:
            if key is not None:
                doc_ref.create(data)
            else:
                doc_ref.set(data)
        except AlreadyExists as e:
            raise DuplicateRecordError("insert", collection, e) from e
        except GoogleAPIError as e:
            raise DataAccessError("insert", collection, e) from e
        return data

    def update_where(self, collection: str, filters: Mapping[str, Any], updates: Any) -> int:
        """Apply ``updates`` to every matching row; returns the number of rows touched."""
        data = self._prepare_data_for_firestore(updates)
        data["updated_at"] = _utcnow()
        return self._batched(collection, filters, "update", lambda batch, ref: batch.update(ref, data))

    def delete_where(self, collection: str, filters: Mapping[str, Any]) -> int:
        """Delete every matching row. Zero matches is not an error."""
        return self._batched(collection, filters, "delete", lambda batch, ref: batch.delete(ref))

    def _batched(self, collection: str, filters: Mapping[str, Any], operation: str, apply) -> int:
        db = self._require_db(operation, collection)
        query = _apply_filters(db.collection(collection), filters)
        affected = 0
        try:
            refs = [doc.reference for doc in query.stream()]
            for start in range(0, len(refs), MAX_BATCH_SIZE):
                batch = db.batch()
                for ref in refs[start:start + MAX_BATCH_SIZE]:
                    apply(batch, ref)
                batch.commit()
                affected += len(refs[start:start + MAX_BATCH_SIZE])
        except GoogleAPIError as e:
            raise DataAccessError(operation, collection, e) from e
        logger.debug("%s on %s matched %d row(s) for %s", operation, collection, affected, dict(filters))
        return affected

    # Keyed documents, for collections addressed by user id rather than numeric id.

    def get_document(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        db = self._require_db("get", collection)
        try:
            doc = db.collection(collection).document(document_id).get()
        except GoogleAPIError as e:
            raise DataAccessError("get", collection, e) from e
        return doc.to_dict() if doc.exists else None

    def set_document(self, collection: str, document_id: str, values: Any) -> Dict[str, Any]:
        data = self._prepare_data_for_firestore(values)
        data.setdefault("created_at", _utcnow())
        db = self._require_db("set", collection)
        try:
            db.collection(collection).document(document_id).set(data)
        except GoogleAPIError as e:
            raise DataAccessError("set", collection, e) from e
        return data

    def delete_document(self, collection: str, document_id: str) -> None:
        db = self._require_db("delete", collection)
        try:
            db.collection(collection).document(document_id).delete()
        except GoogleAPIError as e:
            raise DataAccessError("delete", collection, e) from e

    def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        db = self._require_db("list", collection)
        try:
            return [{"document_id": doc.id, **doc.to_dict()} for doc in db.collection(collection).stream()]
        except GoogleAPIError as e:
            raise DataAccessError("list", collection, e) from e


def get_record_store() -> FirestoreRecordStore:
    return FirestoreRecordStore()
