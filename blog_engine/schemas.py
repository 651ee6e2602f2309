"""
Boundary input shapes.

Every filter, sort and mutation payload is validated here before it reaches
a service: unknown fields, unknown enum values, negative thresholds and
unparseable timestamps are rejected. Python callers use snake_case field
names; JSON callers may use the camelCase aliases.
"""

from enum import Enum as PyEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from blog_engine.models import (
    CommentStatus,
    NotificationType,
    PostStatus,
    Role,
    Theme,
    UserStatus,
    Visibility,
)
from blog_engine.utils import normalize_timestamp


class InputModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


def _unique_ids(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    return list(dict.fromkeys(values))


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class PostFilter(InputModel):
    """Conjunction of optional post predicates."""

    status: Optional[PostStatus] = None
    visibility: Optional[Visibility] = None
    category_id: Optional[str] = None
    author_id: Optional[str] = None
    tag_ids: Optional[List[str]] = Field(None, description="Match posts carrying any of these tags")
    search: Optional[str] = Field(None, description="Substring of title, content or excerpt")
    published_after: Optional[str] = None
    published_before: Optional[str] = None
    min_view_count: Optional[int] = Field(None, ge=0)
    min_like_count: Optional[int] = Field(None, ge=0)

    @field_validator("published_after", "published_before")
    @classmethod
    def _normalize_bounds(cls, value: Optional[str]) -> Optional[str]:
        return normalize_timestamp(value)

    @field_validator("tag_ids")
    @classmethod
    def _dedupe_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _unique_ids(value)


class UserFilter(InputModel):
    role: Optional[Role] = None
    status: Optional[UserStatus] = None
    search: Optional[str] = Field(None, description="Substring of name, username or email")
    created_after: Optional[str] = None
    created_before: Optional[str] = None

    @field_validator("created_after", "created_before")
    @classmethod
    def _normalize_bounds(cls, value: Optional[str]) -> Optional[str]:
        return normalize_timestamp(value)


class CommentFilter(InputModel):
    """
    Comment predicates.

    `parent_id` distinguishes "not given" from an explicit null: passing
    `parent_id=None` selects top-level comments only.
    """

    post_id: Optional[str] = None
    author_id: Optional[str] = None
    status: Optional[CommentStatus] = None
    parent_id: Optional[str] = None

    @property
    def top_level_only(self) -> bool:
        return "parent_id" in self.model_fields_set and self.parent_id is None


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------


class SortDirection(str, PyEnum):
    ASC = "ASC"
    DESC = "DESC"


class PostSortField(str, PyEnum):
    CREATED_AT = "CREATED_AT"
    UPDATED_AT = "UPDATED_AT"
    PUBLISHED_AT = "PUBLISHED_AT"
    VIEW_COUNT = "VIEW_COUNT"
    LIKE_COUNT = "LIKE_COUNT"
    COMMENT_COUNT = "COMMENT_COUNT"
    TITLE = "TITLE"


class UserSortField(str, PyEnum):
    CREATED_AT = "CREATED_AT"
    NAME = "NAME"
    USERNAME = "USERNAME"
    POST_COUNT = "POST_COUNT"
    FOLLOWER_COUNT = "FOLLOWER_COUNT"


class PostSort(InputModel):
    field: PostSortField
    direction: SortDirection = SortDirection.ASC


class UserSort(InputModel):
    field: UserSortField
    direction: SortDirection = SortDirection.ASC


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class CreateUserInput(InputModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=3)
    name: str = Field(..., min_length=1)
    bio: Optional[str] = None
    role: Role = Role.user


class UpdateUserInput(InputModel):
    username: Optional[str] = Field(None, min_length=1, max_length=64)
    email: Optional[str] = Field(None, min_length=3)
    name: Optional[str] = Field(None, min_length=1)
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[UserStatus] = None


class UpdatePreferencesInput(InputModel):
    theme: Optional[Theme] = None
    email_notifications: Optional[bool] = None
    language: Optional[str] = None
    timezone: Optional[str] = None


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class CreatePostInput(InputModel):
    title: str = Field(..., min_length=1)
    content: str
    excerpt: Optional[str] = None
    author_id: str
    category_id: str
    tag_ids: List[str] = Field(default_factory=list)
    status: PostStatus = PostStatus.draft
    visibility: Visibility = Visibility.public
    featured_image_url: Optional[str] = None

    @field_validator("tag_ids")
    @classmethod
    def _dedupe_tags(cls, value: List[str]) -> List[str]:
        return _unique_ids(value)


class UpdatePostInput(InputModel):
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = None
    excerpt: Optional[str] = None
    category_id: Optional[str] = None
    tag_ids: Optional[List[str]] = None
    status: Optional[PostStatus] = None
    visibility: Optional[Visibility] = None
    featured_image_url: Optional[str] = None

    @field_validator("tag_ids")
    @classmethod
    def _dedupe_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _unique_ids(value)


# ---------------------------------------------------------------------------
# Categories and tags
# ---------------------------------------------------------------------------


class CreateCategoryInput(InputModel):
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)
    description: str
    parent_id: Optional[str] = None
    color: str = "#3B82F6"
    icon: str = "folder"


class UpdateCategoryInput(InputModel):
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    sort_order: Optional[int] = None


class CreateTagInput(InputModel):
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)


class UpdateTagInput(InputModel):
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, min_length=1)


# ---------------------------------------------------------------------------
# Comments, media, notifications, audit
# ---------------------------------------------------------------------------


class CreateCommentInput(InputModel):
    post_id: str
    author_id: str
    content: str = Field(..., min_length=1)
    parent_id: Optional[str] = None


class CreateMediaInput(InputModel):
    uploader_id: str
    filename: str = Field(..., min_length=1)
    mime_type: str
    size: int = Field(..., ge=0)
    url: str
    thumbnail_url: Optional[str] = None
    alt: Optional[str] = None
    width: Optional[int] = Field(None, ge=0)
    height: Optional[int] = Field(None, ge=0)


class UpdateMediaInput(InputModel):
    filename: Optional[str] = Field(None, min_length=1)
    alt: Optional[str] = None


class CreateNotificationInput(InputModel):
    user_id: str
    type: NotificationType
    title: str
    message: str
    related_post_id: Optional[str] = None
    related_user_id: Optional[str] = None


class CreateAuditLogInput(InputModel):
    user_id: str
    action: str = Field(..., min_length=1)
    entity_type: str = Field(..., min_length=1)
    entity_id: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    ip_address: str = ""
    user_agent: str = ""


# ---------------------------------------------------------------------------
# Request bodies for single-purpose endpoints
# ---------------------------------------------------------------------------


class UpdateCommentInput(InputModel):
    content: str = Field(..., min_length=1)


class SchedulePostInput(InputModel):
    publish_at: str = Field(..., description="ISO-8601 publication time")

    @field_validator("publish_at")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_timestamp(value)


class BulkIdsInput(InputModel):
    ids: List[str]


class MergeTagsInput(InputModel):
    source_id: str
    target_id: str


class LikeInput(InputModel):
    user_id: str


class FollowInput(InputModel):
    follower_id: str
    following_id: str


class BookmarkInput(InputModel):
    user_id: str
    post_id: str
    note: Optional[str] = None
