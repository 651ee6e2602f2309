"""Shared fixtures: a pinned clock, an empty store and a record factory."""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import pytest

from blog_engine.models import Category, Comment, Post, PostStatus, Tag, User
from blog_engine.schemas import (
    CreateCategoryInput,
    CreateCommentInput,
    CreatePostInput,
    CreateTagInput,
    CreateUserInput,
)
from blog_engine.services import comments, posts, taxonomy, users
from blog_engine.store import Store
from blog_engine.utils import slugify

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value

    def advance(self, **delta) -> None:
        self.current += timedelta(**delta)


class BlogFactory:
    """Creates records through the real mutation services."""

    def __init__(self, store: Store, clock: FakeClock):
        self.store = store
        self.clock = clock
        self._users = 0
        self._default_category: Optional[Category] = None

    def user(self, username: Optional[str] = None, name: Optional[str] = None, **fields) -> User:
        self._users += 1
        username = username or f"user{self._users}"
        return users.create_user(self.store, CreateUserInput(
            username=username,
            email=f"{username}@example.com",
            name=name or username.title(),
            **fields,
        ))

    def category(self, name: str = "General", parent: Optional[Category] = None) -> Category:
        return taxonomy.create_category(self.store, CreateCategoryInput(
            name=name,
            slug=slugify(name),
            description=f"All about {name.lower()}",
            parent_id=parent.id if parent else None,
        ))

    def tag(self, name: str) -> Tag:
        return taxonomy.create_tag(self.store, CreateTagInput(name=name, slug=slugify(name)))

    def post(
        self,
        author: User,
        title: str = "Hello world",
        content: str = "Some words about nothing in particular.",
        category: Optional[Category] = None,
        tags: Iterable[Tag] = (),
        status: PostStatus = PostStatus.draft,
    ) -> Post:
        if category is None:
            if self._default_category is None:
                self._default_category = self.category()
            category = self._default_category
        return posts.create_post(self.store, CreatePostInput(
            title=title,
            content=content,
            author_id=author.id,
            category_id=category.id,
            tag_ids=[t.id for t in tags],
            status=status,
        ))

    def comment(self, post: Post, author: User, parent: Optional[Comment] = None, content: str = "Nice post") -> Comment:
        return comments.create_comment(self.store, CreateCommentInput(
            post_id=post.id,
            author_id=author.id,
            parent_id=parent.id if parent else None,
            content=content,
        ))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """Empty store whose clock is pinned to FIXED_NOW."""
    return Store(clock=clock)


@pytest.fixture
def make(store, clock):
    return BlogFactory(store, clock)
