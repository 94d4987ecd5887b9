from fastapi import APIRouter, Depends, Response, status

from taskmarket.core.config import get_settings
from taskmarket.models.schemas import AdminOverview, BlockedUser, CurrentUser, DeletionOutcome
from taskmarket.db.firebase_ops import get_record_store
from taskmarket.routers.auth import require_admin
from taskmarket.routers.responses import deletion_response
from taskmarket.services import cascade, moderation

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/overview", response_model=AdminOverview)
async def get_overview():
    return moderation.build_overview(get_record_store(), get_settings().active_user_window_days)


@router.delete("/tasks/{task_id}", response_model=DeletionOutcome)
async def delete_task(task_id: int):
    return deletion_response(cascade.delete_task(get_record_store(), task_id))


@router.delete("/users/{user_id}", response_model=DeletionOutcome)
async def delete_user(user_id: str):
    return deletion_response(cascade.delete_user(get_record_store(), user_id))


@router.delete("/comments/{comment_id}", response_model=DeletionOutcome)
async def delete_comment(comment_id: int):
    return deletion_response(cascade.delete_comment(get_record_store(), comment_id))


@router.post("/users/{user_id}/block", response_model=BlockedUser, status_code=status.HTTP_201_CREATED)
async def block_user(user_id: str, current_user: CurrentUser = Depends(require_admin)):
    return moderation.block_user(get_record_store(), user_id, blocked_by=current_user.user_id)


@router.delete("/users/{user_id}/block", status_code=status.HTTP_204_NO_CONTENT)
async def unblock_user(user_id: str):
    moderation.unblock_user(get_record_store(), user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
