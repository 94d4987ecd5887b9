import logging
from datetime import datetime, timedelta, timezone
from typing import List

from taskmarket.models.schemas import (
    BLOCKED_USERS,
    COMMENTS,
    TASKS,
    USER_PROFILES,
    AdminOverview,
    AdminStats,
    BlockedUser,
    Comment,
    Task,
    UserProfile,
)

logger = logging.getLogger(__name__)


def is_blocked(store, user_id: str) -> bool:
    return store.get_document(BLOCKED_USERS, user_id) is not None


def block_user(store, user_id: str, blocked_by: str) -> BlockedUser:
    # Blocking is keyed by user id so users without a profile can be blocked too.
    row = store.set_document(BLOCKED_USERS, user_id, {"user_id": user_id, "blocked_by": blocked_by})
    logger.info("User %r blocked by %r", user_id, blocked_by)
    return BlockedUser(**row)


def unblock_user(store, user_id: str) -> None:
    store.delete_document(BLOCKED_USERS, user_id)
    logger.info("User %r unblocked", user_id)


def blocked_user_ids(store) -> List[str]:
    return [row["document_id"] for row in store.list_documents(BLOCKED_USERS)]


def build_overview(store, active_window_days: int = 30) -> AdminOverview:
    tasks = [Task(**row) for row in store.find_many(TASKS, order_by="created_at", descending=True)]
    users = [UserProfile(**row) for row in store.find_many(USER_PROFILES, order_by="created_at", descending=True)]
    comments = [Comment(**row) for row in store.find_many(COMMENTS, order_by="created_at", descending=True)]
    blocked = blocked_user_ids(store)

    cutoff = datetime.now(timezone.utc) - timedelta(days=active_window_days)
    active = [u for u in users if u.updated_at and _aware(u.updated_at) > cutoff]

    return AdminOverview(
        tasks=tasks,
        users=users,
        comments=comments,
        blocked_user_ids=blocked,
        stats=AdminStats(
            total_users=len(users),
            total_tasks=len(tasks),
            total_comments=len(comments),
            active_users=len(active),
            blocked_users=len(blocked),
            total_revenue=sum(t.price for t in tasks),
        ),
    )


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)
