from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import List, Optional

from taskmarket.models.schemas import (
    COMMENTS,
    TASKS,
    Comment,
    CurrentUser,
    DeletionOutcome,
    Task,
    TaskBrowseResponse,
    TaskCreate,
    TaskWithComments,
)
from taskmarket.db.firebase_ops import get_record_store
from taskmarket.routers.auth import get_current_user
from taskmarket.routers.responses import deletion_response
from taskmarket.services import cascade, moderation
from taskmarket.services.task_browser import ALL_CATEGORIES, SortOrder, browse_tasks, categories_of, group_comments

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def load_task(store, task_id: int) -> Task:
    row = store.get_by_id(TASKS, task_id)
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return Task(**row)


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def post_task(
    task_in: TaskCreate,
    current_user: CurrentUser = Depends(get_current_user)
):
    store = get_record_store()

    if moderation.is_blocked(store, current_user.user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Your account has been blocked")

    # Ownership always comes from the token, never from the payload.
    row = store.insert_one(TASKS, {
        **task_in.model_dump(),
        "user_id": current_user.user_id,
        "user_name": current_user.display_name,
    })
    return Task(**row)


@router.get("", response_model=TaskBrowseResponse)
async def list_tasks(
    search: str = "",
    category: str = ALL_CATEGORIES,
    min_price: Optional[float] = Query(default=None, ge=0),
    max_price: Optional[float] = Query(default=None, ge=0),
    sort: SortOrder = SortOrder.newest,
):
    store = get_record_store()

    tasks = [Task(**row) for row in store.find_many(TASKS, order_by="created_at", descending=True)]
    comments = [Comment(**row) for row in store.find_many(COMMENTS, order_by="created_at")]

    return browse_tasks(
        tasks,
        comments,
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
    )


@router.get("/categories", response_model=List[str])
async def list_categories():
    store = get_record_store()
    return categories_of(Task(**row) for row in store.find_many(TASKS, order_by="created_at", descending=True))


@router.get("/mine", response_model=List[TaskWithComments])
async def list_my_tasks(current_user: CurrentUser = Depends(get_current_user)):
    store = get_record_store()

    my_tasks = [
        Task(**row)
        for row in store.find_many(TASKS, {"user_id": current_user.user_id}, order_by="created_at", descending=True)
    ]
    result = []
    for task in my_tasks:
        comments = [Comment(**row) for row in store.find_many(COMMENTS, {"task_id": task.id})]
        result.append(TaskWithComments(**task.model_dump(), comments=group_comments(comments).get(task.id, [])))
    return result


@router.get("/{task_id}", response_model=TaskWithComments)
async def get_task_details(task_id: int):
    store = get_record_store()

    task = load_task(store, task_id)
    comments = [Comment(**row) for row in store.find_many(COMMENTS, {"task_id": task_id})]
    return TaskWithComments(**task.model_dump(), comments=group_comments(comments).get(task_id, []))


@router.delete("/{task_id}", response_model=DeletionOutcome)
async def delete_task(
    task_id: int,
    current_user: CurrentUser = Depends(get_current_user)
):
    store = get_record_store()

    # A task that is already gone deletes nothing and still succeeds.
    row = store.get_by_id(TASKS, task_id)
    if row and row["user_id"] != current_user.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this task")

    return deletion_response(cascade.delete_task(store, task_id))
