"""
Profile existence resolution.

A user counts as existing when they have a profile row, or have authored
at least one task or comment. Having no profile is therefore not the same
as not existing, and neither is the same as the store being unreachable.
"""
import logging

from taskmarket.core.config import get_settings
from taskmarket.db.firebase_ops import DataAccessError
from taskmarket.models.schemas import (
    COMMENTS,
    TASKS,
    USER_PROFILES,
    ProfileExistence,
    ProfileFound,
    ProfileIncomplete,
    ProfileResolution,
    ResolutionFailed,
    Task,
    UserNotFound,
    UserProfile,
)

logger = logging.getLogger(__name__)


def _has_rows(store, collection: str, user_id: str) -> bool:
    return bool(store.find_many(collection, {"user_id": user_id}, limit=1))


def recent_tasks_for(store, user_id: str, limit: int) -> list[Task]:
    """Newest tasks first. Errors are logged and give an empty list."""
    try:
        rows = store.find_many(TASKS, {"user_id": user_id}, order_by="created_at", descending=True, limit=limit)
    except DataAccessError as e:
        logger.warning("Could not load recent tasks for user %r: %s", user_id, e)
        return []
    return [Task(**row) for row in rows]


def resolve_profile(store, user_id: str) -> ProfileResolution:
    """
    Classify ``user_id`` by probing profiles, then tasks, then comments.

    Probes stop at the first decisive answer. A data-access failure in any
    probe returns ResolutionFailed without running the remaining probes; a
    failure while loading the recent tasks of a found profile does not.
    """
    user_id = (user_id or "").strip()
    limit = get_settings().recent_tasks_limit

    try:
        profile_row = store.find_one(USER_PROFILES, {"user_id": user_id})
        if profile_row is not None:
            return ProfileFound(
                profile=UserProfile(**profile_row),
                recent_tasks=recent_tasks_for(store, user_id, limit),
            )

        if _has_rows(store, TASKS, user_id) or _has_rows(store, COMMENTS, user_id):
            logger.info("User %r has content but no profile", user_id)
            return ProfileIncomplete()
    except DataAccessError as e:
        logger.error("Profile resolution for user %r failed: %s", user_id, e)
        return ResolutionFailed(cause=str(e))

    return UserNotFound()


def check_existence(store, user_id: str) -> ProfileExistence:
    """Existence flags without the profile payload. Store errors propagate."""
    user_id = (user_id or "").strip()
    profile_exists = store.find_one(USER_PROFILES, {"user_id": user_id}) is not None
    user_exists = profile_exists or _has_rows(store, TASKS, user_id) or _has_rows(store, COMMENTS, user_id)
    return ProfileExistence(user_id=user_id, user_exists=user_exists, profile_exists=profile_exists)
