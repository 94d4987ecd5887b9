"""
Cascading deletes for tasks, users and comments.

Children go before parents: comments, then tasks, then the profile. There
is no transaction across the steps. A failed child step is kept as a
warning and the parent step still runs; only the final step decides
whether the outcome is a success. Deleting rows that are already gone
affects zero rows and succeeds.
"""
import logging
from typing import Any, Dict, List, Mapping

from taskmarket.db.firebase_ops import DataAccessError
from taskmarket.models.schemas import COMMENTS, TASKS, USER_PROFILES, DeletionOutcome

logger = logging.getLogger(__name__)


class _Cascade:
    def __init__(self, store, subject: str):
        self.store = store
        self.subject = subject
        self.warnings: List[str] = []
        self.deleted: Dict[str, int] = {}

    def child(self, collection: str, filters: Mapping[str, Any]) -> None:
        try:
            self.deleted[collection] = self.store.delete_where(collection, filters)
        except DataAccessError as e:
            message = f"Could not delete {collection} for {self.subject}: {e}"
            logger.warning(message)
            self.warnings.append(message)

    def final(self, collection: str, filters: Mapping[str, Any]) -> DeletionOutcome:
        try:
            self.deleted[collection] = self.store.delete_where(collection, filters)
        except DataAccessError as e:
            logger.error("Deleting %s failed: %s", self.subject, e)
            return DeletionOutcome(success=False, error=str(e), warnings=self.warnings, deleted=self.deleted)
        logger.info("Deleted %s (%s)", self.subject, self.deleted)
        return DeletionOutcome(success=True, warnings=self.warnings, deleted=self.deleted)


def delete_task(store, task_id: int) -> DeletionOutcome:
    cascade = _Cascade(store, f"task {task_id}")
    cascade.child(COMMENTS, {"task_id": task_id})
    return cascade.final(TASKS, {"id": task_id})


def delete_user(store, user_id: str) -> DeletionOutcome:
    # Comments written by other users on this user's tasks are left in place.
    cascade = _Cascade(store, f"user {user_id!r}")
    cascade.child(COMMENTS, {"user_id": user_id})
    cascade.child(TASKS, {"user_id": user_id})
    return cascade.final(USER_PROFILES, {"user_id": user_id})


def delete_comment(store, comment_id: int) -> DeletionOutcome:
    return _Cascade(store, f"comment {comment_id}").final(COMMENTS, {"id": comment_id})
