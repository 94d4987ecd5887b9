from fastapi import APIRouter, HTTPException, Depends, status
from typing import List

from taskmarket.models.schemas import COMMENTS, Comment, CommentCreate, CurrentUser, DeletionOutcome
from taskmarket.db.firebase_ops import get_record_store
from taskmarket.routers.auth import get_current_user
from taskmarket.routers.responses import deletion_response, resolution_response
from taskmarket.routers.tasks import load_task
from taskmarket.services import cascade, moderation
from taskmarket.services.profile_resolver import resolve_profile

router = APIRouter(tags=["Comments"])  # No prefix here, paths hang off tasks and comments


@router.post("/tasks/{task_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def apply_to_task(
    task_id: int,
    comment_in: CommentCreate,
    current_user: CurrentUser = Depends(get_current_user)
):
    store = get_record_store()

    task = load_task(store, task_id)
    if task.user_id == current_user.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot apply to your own task")

    if moderation.is_blocked(store, current_user.user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Your account has been blocked")

    row = store.insert_one(COMMENTS, {
        "task_id": task_id,
        "user_id": current_user.user_id,
        "user_name": current_user.display_name,
        "content": comment_in.content,
    })
    return Comment(**row)


@router.get("/tasks/{task_id}/comments", response_model=List[Comment])
async def list_task_comments(task_id: int):
    store = get_record_store()

    load_task(store, task_id)
    return [Comment(**row) for row in store.find_many(COMMENTS, {"task_id": task_id}, order_by="created_at")]


@router.get("/tasks/{task_id}/comments/{comment_id}/applicant")
async def get_applicant_details(
    task_id: int,
    comment_id: int,
    current_user: CurrentUser = Depends(get_current_user)
):
    """Applicant contact details, visible to the task owner only."""
    store = get_record_store()

    task = load_task(store, task_id)
    if task.user_id != current_user.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the task owner can view applicants")

    row = store.get_by_id(COMMENTS, comment_id)
    if not row or row.get("task_id") != task_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")

    return resolution_response(resolve_profile(store, row["user_id"]))


@router.delete("/comments/{comment_id}", response_model=DeletionOutcome)
async def delete_comment(
    comment_id: int,
    current_user: CurrentUser = Depends(get_current_user)
):
    store = get_record_store()

    row = store.get_by_id(COMMENTS, comment_id)
    if row and row["user_id"] != current_user.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this comment")

    return deletion_response(cascade.delete_comment(store, comment_id))
