import logging

from fastapi import APIRouter, HTTPException, Depends, status

from taskmarket.models.schemas import USER_PROFILES, CurrentUser, ProfileExistence, UserProfile, UserProfileUpdate
from taskmarket.db.firebase_ops import DuplicateRecordError, get_record_store
from taskmarket.routers.auth import get_current_user
from taskmarket.routers.responses import resolution_response
from taskmarket.services.profile_resolver import check_existence, resolve_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get("/me", response_model=UserProfile)
async def get_my_profile(current_user: CurrentUser = Depends(get_current_user)):
    store = get_record_store()

    row = store.find_one(USER_PROFILES, {"user_id": current_user.user_id})
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not created yet")
    return UserProfile(**row)


@router.put("/me", response_model=UserProfile)
async def save_my_profile(
    profile_in: UserProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user)
):
    store = get_record_store()

    data = profile_in.model_dump()
    if not store.find_one(USER_PROFILES, {"user_id": current_user.user_id}):
        # Keyed by user id, so a concurrent first save cannot create a second row.
        try:
            row = store.insert_one(USER_PROFILES, {**data, "user_id": current_user.user_id}, key=current_user.user_id)
            return UserProfile(**row)
        except DuplicateRecordError:
            logger.info("Profile for %r was created concurrently, updating it", current_user.user_id)

    store.update_where(USER_PROFILES, {"user_id": current_user.user_id}, data)
    row = store.find_one(USER_PROFILES, {"user_id": current_user.user_id})
    if not row:  # Deleted between the write and the read
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found after update")
    return UserProfile(**row)


@router.get("/{user_id}")
async def get_public_profile(user_id: str):
    """
    Public profile page data.

    200 with status "found" or "profile_incomplete", 404 with "user_not_found",
    503 with "resolution_failed" when the store could not be queried.
    """
    return resolution_response(resolve_profile(get_record_store(), user_id))


@router.get("/{user_id}/existence", response_model=ProfileExistence)
async def get_profile_existence(user_id: str):
    return check_existence(get_record_store(), user_id)
