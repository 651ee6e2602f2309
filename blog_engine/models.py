from dataclasses import dataclass, field
from enum import Enum as PyEnum
from typing import Optional, Tuple


class EntityKind(str, PyEnum):
    user = "user"
    category = "category"
    tag = "tag"
    post = "post"
    comment = "comment"
    like = "like"
    follow = "follow"
    bookmark = "bookmark"
    notification = "notification"
    media = "media"
    audit_log = "audit_log"


class Role(str, PyEnum):
    admin = "admin"
    moderator = "moderator"
    author = "author"
    user = "user"
    guest = "guest"


class UserStatus(str, PyEnum):
    active = "active"
    suspended = "suspended"
    pending = "pending"


class Theme(str, PyEnum):
    light = "light"
    dark = "dark"
    system = "system"


class PostStatus(str, PyEnum):
    draft = "draft"
    published = "published"
    archived = "archived"
    scheduled = "scheduled"


class Visibility(str, PyEnum):
    public = "public"
    private = "private"
    members = "members"


class CommentStatus(str, PyEnum):
    approved = "approved"
    pending = "pending"
    spam = "spam"
    deleted = "deleted"


class TargetType(str, PyEnum):
    post = "post"
    comment = "comment"


class NotificationType(str, PyEnum):
    like = "like"
    comment = "comment"
    follow = "follow"
    mention = "mention"
    system = "system"


@dataclass(frozen=True)
class UserPreferences:
    theme: Theme = Theme.system
    email_notifications: bool = True
    language: str = "en"
    timezone: str = "UTC"


@dataclass(frozen=True)
class User:
    id: str
    username: str
    email: str
    name: str
    created_at: str
    updated_at: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Role = Role.user
    status: UserStatus = UserStatus.pending
    preferences: UserPreferences = field(default_factory=UserPreferences)
    last_login_at: Optional[str] = None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    slug: str
    description: str
    created_at: str
    sort_order: int
    parent_id: Optional[str] = None
    color: str = "#3B82F6"
    icon: str = "folder"


@dataclass(frozen=True)
class Tag:
    id: str
    name: str
    slug: str
    usage_count: int = 0


@dataclass(frozen=True)
class Post:
    id: str
    title: str
    slug: str
    excerpt: str
    content: str
    author_id: str
    category_id: Optional[str]
    created_at: str
    updated_at: str
    tag_ids: Tuple[str, ...] = ()
    status: PostStatus = PostStatus.draft
    visibility: Visibility = Visibility.public
    featured_image_url: Optional[str] = None
    reading_time_minutes: int = 1
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    published_at: Optional[str] = None
    scheduled_at: Optional[str] = None


@dataclass(frozen=True)
class Comment:
    id: str
    post_id: str
    author_id: str
    content: str
    created_at: str
    updated_at: str
    parent_id: Optional[str] = None
    status: CommentStatus = CommentStatus.pending
    like_count: int = 0


@dataclass(frozen=True)
class Like:
    id: str
    user_id: str
    target_type: TargetType
    target_id: str
    created_at: str


@dataclass(frozen=True)
class Follow:
    id: str
    follower_id: str
    following_id: str
    created_at: str


@dataclass(frozen=True)
class Bookmark:
    id: str
    user_id: str
    post_id: str
    created_at: str
    note: Optional[str] = None


@dataclass(frozen=True)
class Notification:
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    created_at: str
    read: bool = False
    related_post_id: Optional[str] = None
    related_user_id: Optional[str] = None


@dataclass(frozen=True)
class Media:
    id: str
    uploader_id: str
    filename: str
    mime_type: str
    size: int
    url: str
    created_at: str
    thumbnail_url: Optional[str] = None
    alt: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


@dataclass(frozen=True)
class AuditLog:
    id: str
    user_id: str
    action: str
    entity_type: str
    entity_id: str
    created_at: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    ip_address: str = ""
    user_agent: str = ""


RECORD_TYPES = {
    EntityKind.user: User,
    EntityKind.category: Category,
    EntityKind.tag: Tag,
    EntityKind.post: Post,
    EntityKind.comment: Comment,
    EntityKind.like: Like,
    EntityKind.follow: Follow,
    EntityKind.bookmark: Bookmark,
    EntityKind.notification: Notification,
    EntityKind.media: Media,
    EntityKind.audit_log: AuditLog,
}
