from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from faker import Faker

from blog_engine.config import SEED_POSTS, SEED_RANDOM, SEED_USERS
from blog_engine.models import (
    AuditLog, Bookmark, Category, Comment, CommentStatus, EntityKind, Follow, Like, Media,
    Notification, NotificationType, Post, PostStatus, Role, Tag, TargetType, Theme, User,
    UserPreferences, UserStatus, Visibility,
)
from blog_engine.services.audit import snapshot
from blog_engine.services.mutations import adjust_counter
from blog_engine.store import Store
from blog_engine.utils import format_timestamp, make_excerpt, reading_time, slugify

logger = logging.getLogger(__name__)

fake = Faker()

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

# (name, parent name or None, color, icon)
CATEGORY_TREE = [
    ("Technology", None, "#3B82F6", "cpu"),
    ("Programming", "Technology", "#6366F1", "code"),
    ("DevOps", "Technology", "#0EA5E9", "server"),
    ("Data Science", "Technology", "#8B5CF6", "chart"),
    ("Lifestyle", None, "#EC4899", "heart"),
    ("Travel", "Lifestyle", "#F59E0B", "plane"),
    ("Food", "Lifestyle", "#EF4444", "utensils"),
    ("Business", None, "#10B981", "briefcase"),
]

TAG_NAMES = [
    "python", "graphql", "fastapi", "devops", "cloud", "ai", "machine-learning", "databases",
    "performance", "security", "testing", "career", "startups", "travel", "cooking",
]
POPULAR_TAGS = ("python", "graphql", "ai", "cloud")


def seed_random_generators(seed: int = SEED_RANDOM) -> None:
    """Seed `random` and Faker so a seeded store is reproducible."""
    random.seed(seed)
    Faker.seed(seed)
    fake.unique.clear()


def _ts(value: datetime) -> str:
    return format_timestamp(value)


def make_users(store: Store, n_users: int, now: datetime) -> list[User]:
    roles = [Role.author] * 5 + [Role.user] * 4 + [Role.moderator] + [Role.guest]
    statuses = [UserStatus.active] * 8 + [UserStatus.pending] + [UserStatus.suspended]
    users = []
    for i in range(n_users):
        username = fake.unique.user_name()
        created = fake.date_time_between(start_date=now - timedelta(days=720), end_date=now - timedelta(days=90), tzinfo=timezone.utc)
        updated = created + timedelta(days=random.randint(0, 60))
        users.append(store.put(User(
            id=store.new_id(EntityKind.user),
            username=username,
            email=f"{username}@example.com",
            name=fake.name(),
            bio=fake.sentence(nb_words=12) if random.random() < 0.8 else None,
            avatar_url=AVATAR_URL.format(seed=username),
            role=Role.admin if i == 0 else random.choice(roles),
            status=UserStatus.active if i == 0 else random.choice(statuses),
            preferences=UserPreferences(
                theme=random.choice(list(Theme)),
                email_notifications=random.random() < 0.7,
                language=random.choice(["en", "en", "en", "de", "es"]),
                timezone=random.choice(["UTC", "America/New_York", "Europe/London", "Asia/Tokyo"]),
            ),
            created_at=_ts(created),
            updated_at=_ts(updated),
            last_login_at=_ts(updated + timedelta(hours=random.randint(1, 500))),
        )))
    return users


def make_categories(store: Store, now: datetime) -> list[Category]:
    by_name: dict[str, Category] = {}
    for order, (name, parent, color, icon) in enumerate(CATEGORY_TREE, 1):
        by_name[name] = store.put(Category(
            id=store.new_id(EntityKind.category),
            name=name,
            slug=slugify(name),
            description=fake.sentence(nb_words=10),
            parent_id=by_name[parent].id if parent else None,
            color=color,
            icon=icon,
            sort_order=order,
            created_at=_ts(now - timedelta(days=800 - order)),
        ))
    return list(by_name.values())


def make_tags(store: Store) -> list[Tag]:
    return [
        store.put(Tag(id=store.new_id(EntityKind.tag), name=name, slug=slugify(name)))
        for name in TAG_NAMES
    ]


def make_posts(
    store: Store,
    users: Sequence[User],
    categories: Sequence[Category],
    tags: Sequence[Tag],
    n_posts: int,
    now: datetime,
) -> list[Post]:
    authors = [u for u in users if u.role in (Role.admin, Role.author, Role.moderator)] or list(users)
    statuses = [PostStatus.published] * 7 + [PostStatus.draft] * 2 + [PostStatus.archived, PostStatus.scheduled]
    visibilities = [Visibility.public] * 8 + [Visibility.members, Visibility.private]
    # popular tags show up more often
    weights = [5 if t.name in POPULAR_TAGS else 1 for t in tags]

    posts = []
    for _ in range(n_posts):
        author = random.choice(authors)
        created = fake.date_time_between(start_date=now - timedelta(days=365), end_date=now - timedelta(days=1), tzinfo=timezone.utc)
        status = random.choice(statuses)
        title = fake.sentence(nb_words=random.randint(4, 9)).rstrip(".")
        content = "\n\n".join(fake.paragraphs(nb=random.randint(3, 12)))
        chosen = random.choices(tags, weights=weights, k=random.randint(1, 4))
        tag_ids = tuple(dict.fromkeys(t.id for t in chosen))

        post = store.put(Post(
            id=store.new_id(EntityKind.post),
            title=title,
            slug=slugify(title),
            excerpt=make_excerpt(content),
            content=content,
            author_id=author.id,
            category_id=random.choice(categories).id,
            tag_ids=tag_ids,
            status=status,
            visibility=random.choice(visibilities),
            featured_image_url=f"https://picsum.photos/seed/{slugify(title)}/1200/630" if random.random() < 0.6 else None,
            reading_time_minutes=reading_time(content),
            view_count=random.randint(0, 5000) if status == PostStatus.published else 0,
            published_at=_ts(created + timedelta(hours=random.randint(1, 48))) if status == PostStatus.published else None,
            scheduled_at=_ts(now + timedelta(days=random.randint(1, 30))) if status == PostStatus.scheduled else None,
            created_at=_ts(created),
            updated_at=_ts(created + timedelta(days=random.randint(0, 10))),
        ))
        for tag_id in tag_ids:
            adjust_counter(store, EntityKind.tag, tag_id, "usage_count", 1)
        posts.append(post)
    return posts


def make_comment_tree(
    store: Store,
    post: Post,
    users: Sequence[User],
    max_roots: int = 3,
    max_depth: int = 4,
    max_children: int = 3,
) -> None:
    """Generate a small random tree of comments for one post."""
    post_created = datetime.fromisoformat(post.created_at.replace("Z", "+00:00"))
    statuses = [CommentStatus.approved] * 6 + [CommentStatus.pending] * 2 + [CommentStatus.spam]

    def add_comment(parent_id: Optional[str], depth: int) -> Comment:
        when = _ts(post_created + timedelta(minutes=random.randint(1, 60 * depth + 30)))
        comment = store.put(Comment(
            id=store.new_id(EntityKind.comment),
            post_id=post.id,
            author_id=random.choice(users).id,
            parent_id=parent_id,
            content=fake.sentence(nb_words=random.randint(5, 25)),
            status=random.choice(statuses),
            created_at=when,
            updated_at=when,
        ))
        adjust_counter(store, EntityKind.post, post.id, "comment_count", 1)
        return comment

    def make_node(parent_id: str, depth: int) -> None:
        if depth > max_depth:
            return
        # fewer replies the deeper the thread goes
        for _ in range(random.randint(0, max(0, max_children - depth + 1))):
            reply = add_comment(parent_id, depth)
            make_node(reply.id, depth + 1)

    for _ in range(random.randint(0, max_roots)):
        root = add_comment(None, 1)
        make_node(root.id, 2)


def make_likes(store: Store, posts: Sequence[Post], users: Sequence[User]) -> None:
    for post in posts:
        if post.status != PostStatus.published:
            continue
        for user in random.sample(list(users), k=random.randint(0, min(len(users), 12))):
            store.put(Like(
                id=store.new_id(EntityKind.like),
                user_id=user.id,
                target_type=TargetType.post,
                target_id=post.id,
                created_at=post.published_at or post.created_at,
            ))
            adjust_counter(store, EntityKind.post, post.id, "like_count", 1)

    for comment in store.all(EntityKind.comment):
        if comment.status != CommentStatus.approved or random.random() < 0.5:
            continue
        for user in random.sample(list(users), k=random.randint(1, min(len(users), 4))):
            store.put(Like(
                id=store.new_id(EntityKind.like),
                user_id=user.id,
                target_type=TargetType.comment,
                target_id=comment.id,
                created_at=comment.created_at,
            ))
            adjust_counter(store, EntityKind.comment, comment.id, "like_count", 1)


def make_follows(store: Store, users: Sequence[User], now: datetime) -> None:
    for follower in users:
        others = [u for u in users if u.id != follower.id]
        for following in random.sample(others, k=random.randint(0, min(len(others), 5))):
            store.put(Follow(
                id=store.new_id(EntityKind.follow),
                follower_id=follower.id,
                following_id=following.id,
                created_at=_ts(now - timedelta(days=random.randint(1, 80))),
            ))


def make_bookmarks(store: Store, posts: Sequence[Post], users: Sequence[User], now: datetime) -> None:
    published = [p for p in posts if p.status == PostStatus.published]
    if not published:
        return
    for user in users:
        for post in random.sample(published, k=random.randint(0, min(len(published), 3))):
            store.put(Bookmark(
                id=store.new_id(EntityKind.bookmark),
                user_id=user.id,
                post_id=post.id,
                note=fake.sentence(nb_words=6) if random.random() < 0.3 else None,
                created_at=_ts(now - timedelta(days=random.randint(0, 30))),
            ))


def make_notifications(store: Store, users: Sequence[User], now: datetime) -> None:
    for user in users:
        for _ in range(random.randint(0, 3)):
            store.put(Notification(
                id=store.new_id(EntityKind.notification),
                user_id=user.id,
                type=NotificationType.system,
                title="Welcome aboard" if random.random() < 0.5 else "Product update",
                message=fake.sentence(nb_words=12),
                read=random.random() < 0.5,
                created_at=_ts(now - timedelta(hours=random.randint(1, 24 * 30))),
            ))


def make_media(store: Store, users: Sequence[User], now: datetime) -> None:
    uploaders = [u for u in users if u.role in (Role.admin, Role.author)] or list(users)
    for uploader in uploaders:
        for _ in range(random.randint(0, 2)):
            filename = f"{fake.word()}-{random.randint(100, 999)}.jpg"
            width, height = random.choice([(1200, 630), (800, 600), (1920, 1080)])
            store.put(Media(
                id=store.new_id(EntityKind.media),
                uploader_id=uploader.id,
                filename=filename,
                mime_type="image/jpeg",
                size=random.randint(40_000, 2_000_000),
                url=f"https://cdn.example.com/uploads/{filename}",
                thumbnail_url=f"https://cdn.example.com/uploads/thumb-{filename}",
                alt=fake.sentence(nb_words=5),
                width=width,
                height=height,
                created_at=_ts(now - timedelta(days=random.randint(1, 200))),
            ))


def make_audit_logs(store: Store, users: Sequence[User], posts: Sequence[Post], now: datetime) -> None:
    admin = users[0]
    for post in random.sample(list(posts), k=min(len(posts), 5)):
        store.put(AuditLog(
            id=store.new_id(EntityKind.audit_log),
            user_id=admin.id,
            action="post.review",
            entity_type="post",
            entity_id=post.id,
            new_value=snapshot(post),
            ip_address=fake.ipv4(),
            user_agent=fake.user_agent(),
            created_at=_ts(now - timedelta(hours=random.randint(1, 24 * 14))),
        ))


def seed_store(
    store: Store,
    n_users: int = SEED_USERS,
    n_posts: int = SEED_POSTS,
    seed: int = SEED_RANDOM,
) -> Store:
    """
    Populate a store with a realistic, reproducible dataset.

    Every denormalized counter is built up together with the records it
    counts. Timestamps are placed relative to the store's clock, so a pinned
    clock and the same seed give identical data.

    Args:
        store: Store to fill (usually empty)
        n_users: Number of users
        n_posts: Number of posts
        seed: Seed for `random` and Faker

    Returns:
        The same store
    """
    seed_random_generators(seed)
    now = store.clock()

    with store.transaction():
        users = make_users(store, n_users, now)
        categories = make_categories(store, now)
        tags = make_tags(store)
        posts = make_posts(store, users, categories, tags, n_posts, now) if users else []
        for post in posts:
            if random.random() < 0.7:
                make_comment_tree(store, post, users)
        if users:
            make_likes(store, posts, users)
            make_follows(store, users, now)
            make_bookmarks(store, posts, users, now)
            make_notifications(store, users, now)
            make_media(store, users, now)
            make_audit_logs(store, users, posts, now)

    logger.info(
        "Seeded store: %d users, %d posts, %d comments, %d likes",
        store.count(EntityKind.user), store.count(EntityKind.post),
        store.count(EntityKind.comment), store.count(EntityKind.like),
    )
    return store
