from collections import defaultdict
from enum import Enum
from typing import Dict, Iterable, List, Optional

from taskmarket.models.schemas import Comment, Task, TaskBrowseResponse, TaskBrowseStats, TaskWithComments

ALL_CATEGORIES = "all"


class SortOrder(str, Enum):
    newest = "newest"
    oldest = "oldest"
    price_high = "price-high"
    price_low = "price-low"
    most_applications = "most-applications"


def group_comments(comments: Iterable[Comment]) -> Dict[int, List[Comment]]:
    """Group comments by parent task, oldest first within each task."""
    grouped: Dict[int, List[Comment]] = defaultdict(list)
    for comment in sorted(comments, key=lambda c: c.created_at):
        grouped[comment.task_id].append(comment)
    return grouped


def categories_of(tasks: Iterable[Task]) -> List[str]:
    """Distinct categories in first-seen order."""
    return list(dict.fromkeys(task.category for task in tasks))


def _matches(task: Task, search: str, category: str, min_price: Optional[float], max_price: Optional[float]) -> bool:
    if search:
        haystacks = (task.title, task.description, task.user_name)
        if not any(search in text.lower() for text in haystacks):
            return False
    if category != ALL_CATEGORIES and task.category != category:
        return False
    if min_price is not None and task.price < min_price:
        return False
    if max_price is not None and task.price > max_price:
        return False
    return True


def browse_tasks(
    tasks: List[Task],
    comments: List[Comment],
    search: str = "",
    category: str = ALL_CATEGORIES,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    sort: SortOrder = SortOrder.newest,
) -> TaskBrowseResponse:
    """Filter (all predicates must hold) and sort tasks, attaching their applications."""
    by_task = group_comments(comments)
    search = search.strip().lower()

    selected = [t for t in tasks if _matches(t, search, category or ALL_CATEGORIES, min_price, max_price)]

    if sort == SortOrder.newest:
        selected.sort(key=lambda t: t.created_at, reverse=True)
    elif sort == SortOrder.oldest:
        selected.sort(key=lambda t: t.created_at)
    elif sort == SortOrder.price_high:
        selected.sort(key=lambda t: t.price, reverse=True)
    elif sort == SortOrder.price_low:
        selected.sort(key=lambda t: t.price)
    elif sort == SortOrder.most_applications:
        selected.sort(key=lambda t: len(by_task.get(t.id, [])), reverse=True)

    average = sum(t.price for t in selected) / len(selected) if selected else None
    return TaskBrowseResponse(
        tasks=[TaskWithComments(**t.model_dump(), comments=by_task.get(t.id, [])) for t in selected],
        stats=TaskBrowseStats(total=len(selected), average_price=average, categories=categories_of(tasks)),
    )
