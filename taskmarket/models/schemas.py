from typing import Optional, List, Dict, Literal, Union
from datetime import date, datetime, timezone
from pydantic import BaseModel, EmailStr, Field, field_validator

TASKS = "tasks"
COMMENTS = "comments"
USER_PROFILES = "user_profiles"
BLOCKED_USERS = "blocked_users"


def _required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class CurrentUser(BaseModel):
    user_id: str
    display_name: str
    email: Optional[str] = None
    is_admin: bool = False

class TaskBase(BaseModel):
    title: str
    description: str
    price: float = Field(gt=0)
    deadline: date
    category: str

class TaskCreate(TaskBase):
    check_required_text = field_validator("title", "description", "category")(_required_text)

    @field_validator("deadline")
    @classmethod
    def deadline_after_today(cls, value: date) -> date:
        if value <= datetime.now(timezone.utc).date():
            raise ValueError("Deadline must be at least tomorrow")
        return value

class Task(TaskBase):
    id: int
    user_id: str  # Owner
    user_name: str
    created_at: datetime
    updated_at: Optional[datetime] = None

class CommentCreate(BaseModel):
    content: str

    check_required_text = field_validator("content")(_required_text)

class Comment(BaseModel):
    id: int
    task_id: int  # Parent task
    user_id: str  # Author
    user_name: str
    content: str
    created_at: datetime

class UserProfileBase(BaseModel):
    full_name: str
    email: EmailStr
    phone_number: Optional[str] = None
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    instagram_id: Optional[str] = None
    linkedin_id: Optional[str] = None
    twitter_id: Optional[str] = None
    website_url: Optional[str] = None
    skills: List[str] = []
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    location: Optional[str] = None

class UserProfileUpdate(UserProfileBase):
    check_required_text = field_validator("full_name")(_required_text)

    @field_validator("skills")
    @classmethod
    def normalize_skills(cls, skills: List[str]) -> List[str]:
        # Order is kept; blanks and repeats are dropped.
        seen = []
        for skill in skills:
            skill = skill.strip()
            if skill and skill not in seen:
                seen.append(skill)
        return seen

class UserProfile(UserProfileBase):
    id: int
    user_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

class TaskWithComments(Task):
    comments: List[Comment] = []

class TaskBrowseStats(BaseModel):
    total: int
    average_price: Optional[float] = None
    categories: List[str] = []

class TaskBrowseResponse(BaseModel):
    tasks: List[TaskWithComments]
    stats: TaskBrowseStats

# Existence resolver outcomes

class ProfileFound(BaseModel):
    status: Literal["found"] = "found"
    profile: UserProfile
    recent_tasks: List[Task] = []

class ProfileIncomplete(BaseModel):
    status: Literal["profile_incomplete"] = "profile_incomplete"
    message: str = "Profile Not Complete"
    detail: str = "This user exists but hasn't completed their profile yet."

class UserNotFound(BaseModel):
    status: Literal["user_not_found"] = "user_not_found"
    message: str = "User Not Found"
    detail: str = "The user ID is incorrect, the account was deleted, or the link is outdated."

class ResolutionFailed(BaseModel):
    status: Literal["resolution_failed"] = "resolution_failed"
    message: str = "Error Loading Profile"
    cause: str
    retry: bool = True

ProfileResolution = Union[ProfileFound, ProfileIncomplete, UserNotFound, ResolutionFailed]

class ProfileExistence(BaseModel):
    user_id: str
    user_exists: bool
    profile_exists: bool

# Cascading deletion

class DeletionOutcome(BaseModel):
    success: bool
    error: Optional[str] = None
    warnings: List[str] = []
    deleted: Dict[str, int] = {}

# Admin

class BlockedUser(BaseModel):
    user_id: str
    blocked_by: Optional[str] = None
    created_at: Optional[datetime] = None

class AdminStats(BaseModel):
    total_users: int
    total_tasks: int
    total_comments: int
    active_users: int
    blocked_users: int
    total_revenue: float

class AdminOverview(BaseModel):
    tasks: List[Task]
    users: List[UserProfile]
    comments: List[Comment]
    blocked_user_ids: List[str]
    stats: AdminStats
