"""Tests for filtering, sorting and the list queries."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from blog_engine.errors import InvalidInputError
from blog_engine.models import PostStatus, Role, UserStatus
from blog_engine.schemas import (
    CommentFilter,
    PostFilter,
    PostSort,
    PostSortField,
    SortDirection,
    UserFilter,
    UserSort,
    UserSortField,
)
from blog_engine.services import posts, query, social


def _ids(records):
    return [r.id for r in records]


class TestPostOrdering:
    """Default and explicit post ordering."""

    def test_default_order_is_newest_first(self, make, clock):
        author = make.user()
        for day in (1, 2, 3):
            clock.set(datetime(2024, 1, day, tzinfo=timezone.utc))
            make.post(author, title=f"January {day}")

        found = query.list_posts(make.store)

        assert [p.title for p in found] == ["January 3", "January 2", "January 1"]

    def test_sort_ascending_by_title_ignores_case(self, make):
        author = make.user()
        make.post(author, title="banana")
        make.post(author, title="Apple")
        make.post(author, title="cherry")

        found = query.list_posts(make.store, sort=PostSort(field=PostSortField.TITLE))

        assert [p.title for p in found] == ["Apple", "banana", "cherry"]

    def test_descending_sort_is_stable(self, make, store):
        author = make.user()
        p1 = make.post(author, title="one")
        p2 = make.post(author, title="two")
        p3 = make.post(author, title="three")
        posts.increment_view_count(store, p2.id)

        found = query.list_posts(
            store, sort=PostSort(field=PostSortField.VIEW_COUNT, direction=SortDirection.DESC)
        )

        # p1 and p3 tie at zero views and keep store order
        assert _ids(found) == [p2.id, p1.id, p3.id]

    def test_sort_by_published_at_puts_unpublished_first(self, make, clock):
        author = make.user()
        draft = make.post(author, title="draft")
        published = make.post(author, title="live", status=PostStatus.published)

        found = query.list_posts(make.store, sort=PostSort(field=PostSortField.PUBLISHED_AT))

        assert _ids(found) == [draft.id, published.id]


class TestPostFilters:
    """Each predicate narrows the result; all of them combine with AND."""

    def test_status_filter(self, make):
        author = make.user()
        make.post(author, title="draft")
        live = make.post(author, title="live", status=PostStatus.published)

        found = query.list_posts(make.store, post_filter=PostFilter(status=PostStatus.published))

        assert _ids(found) == [live.id]

    def test_tag_filter_matches_any(self, make):
        author = make.user()
        python, cloud, food = make.tag("python"), make.tag("cloud"), make.tag("food")
        p1 = make.post(author, title="py", tags=[python])
        p2 = make.post(author, title="cl", tags=[cloud])
        make.post(author, title="fd", tags=[food])

        found = query.list_posts(make.store, post_filter=PostFilter(tag_ids=[python.id, cloud.id]))

        assert set(_ids(found)) == {p1.id, p2.id}

    def test_search_is_case_insensitive(self, make):
        author = make.user()
        match = make.post(author, title="GraphQL Basics")
        make.post(author, title="Cooking pasta", content="Boil water")

        found = query.list_posts(make.store, post_filter=PostFilter(search="graphql"))

        assert _ids(found) == [match.id]

    def test_filters_combine(self, make):
        author = make.user()
        other = make.user()
        make.post(author, title="mine draft")
        mine = make.post(author, title="mine live", status=PostStatus.published)
        make.post(other, title="theirs live", status=PostStatus.published)

        found = query.list_posts(
            make.store,
            post_filter=PostFilter(author_id=author.id, status=PostStatus.published),
        )

        assert _ids(found) == [mine.id]

    def test_published_window(self, make, clock):
        author = make.user()
        clock.set(datetime(2024, 1, 10, tzinfo=timezone.utc))
        early = make.post(author, title="early", status=PostStatus.published)
        clock.set(datetime(2024, 3, 10, tzinfo=timezone.utc))
        make.post(author, title="late", status=PostStatus.published)
        make.post(author, title="never published")

        found = query.list_posts(
            make.store,
            post_filter=PostFilter(published_after="2024-01-01", published_before="2024-02-01T00:00:00Z"),
        )

        assert _ids(found) == [early.id]

    def test_min_like_count(self, make, store):
        author = make.user()
        fan = make.user()
        liked = make.post(author, title="liked", status=PostStatus.published)
        make.post(author, title="ignored", status=PostStatus.published)
        social.like_post(store, liked.id, fan.id)

        found = query.list_posts(store, post_filter=PostFilter(min_like_count=1))

        assert _ids(found) == [liked.id]

    def test_invalid_timestamp_is_rejected(self):
        with pytest.raises(ValidationError):
            PostFilter(published_after="last tuesday")

    def test_negative_threshold_is_rejected(self):
        with pytest.raises(ValidationError):
            PostFilter(min_view_count=-1)

    def test_unknown_filter_field_is_rejected(self):
        with pytest.raises(ValidationError):
            PostFilter(colour="red")

    def test_camel_case_aliases(self):
        f = PostFilter.model_validate({"authorId": "1", "minViewCount": 3})
        assert f.author_id == "1"
        assert f.min_view_count == 3


class TestOffsetPagination:
    """Offset pagination runs after filtering and sorting."""

    def test_limit_and_offset(self, make, clock):
        author = make.user()
        for day in range(1, 6):
            clock.set(datetime(2024, 1, day, tzinfo=timezone.utc))
            make.post(author, title=f"day {day}")

        page = query.list_posts(make.store, limit=2, offset=1)

        assert [p.title for p in page] == ["day 4", "day 3"]

    @pytest.mark.parametrize("page_size", [1, 3, 4])
    def test_pages_cover_every_post_once(self, make, clock, page_size):
        author = make.user()
        for i in range(7):
            clock.set(datetime(2024, 1, 1 + i // 2, tzinfo=timezone.utc))
            make.post(author, title=f"post {i}")
        everything = query.list_posts(make.store, limit=100)

        pages = []
        offset = 0
        while True:
            page = query.list_posts(make.store, limit=page_size, offset=offset)
            if not page:
                break
            pages.extend(page)
            offset += page_size

        assert len(everything) == 7
        assert pages == everything

    def test_negative_limit_raises(self, store):
        with pytest.raises(InvalidInputError):
            query.list_posts(store, limit=-1)

    def test_offset_past_end_is_empty(self, make):
        make.post(make.user())
        assert query.list_posts(make.store, offset=10) == []


class TestUsers:
    """User filters, sorts and lookups."""

    def test_filter_by_role_and_search(self, make):
        make.user("alice", role=Role.author)
        make.user("bob", role=Role.author)
        make.user("alfred")

        found = query.list_users(make.store, user_filter=UserFilter(role=Role.author, search="AL"))

        assert [u.username for u in found] == ["alice"]

    def test_new_users_are_pending(self, make):
        make.user()
        assert query.list_users(make.store, user_filter=UserFilter(status=UserStatus.pending))

    def test_sort_by_post_count(self, make):
        quiet = make.user("quiet")
        busy = make.user("busy")
        make.post(busy, title="a")
        make.post(busy, title="b")
        make.post(quiet, title="c")

        found = query.list_users(
            make.store, sort=UserSort(field=UserSortField.POST_COUNT, direction=SortDirection.DESC)
        )

        assert [u.username for u in found] == ["busy", "quiet"]

    def test_default_order_is_store_order(self, make):
        make.user("zed")
        make.user("amy")
        assert [u.username for u in query.list_users(make.store)] == ["zed", "amy"]

    def test_connection_defaults_to_name_order(self, make):
        make.user("zed", name="Zed")
        make.user("amy", name="amy")

        connection = query.users_connection(make.store)

        assert [u.username for u in connection.nodes] == ["amy", "zed"]

    def test_lookup_by_username(self, make):
        alice = make.user("alice")
        assert query.get_user(make.store, username="alice") == alice
        assert query.get_user(make.store, username="nobody") is None
        assert query.get_user(make.store) is None


class TestComments:
    """Comment filters distinguish an omitted parent from an explicit null."""

    def test_top_level_only(self, make):
        author = make.user()
        post = make.post(author)
        root = make.comment(post, author)
        reply = make.comment(post, author, parent=root)

        everything = query.list_comments(make.store, CommentFilter(post_id=post.id))
        top_level = query.list_comments(make.store, CommentFilter(post_id=post.id, parent_id=None))
        replies = query.list_comments(make.store, CommentFilter(parent_id=root.id))

        assert set(_ids(everything)) == {root.id, reply.id}
        assert _ids(top_level) == [root.id]
        assert _ids(replies) == [reply.id]

    def test_omitted_parent_is_not_top_level(self):
        assert not CommentFilter(post_id="1").top_level_only
        assert CommentFilter(parent_id=None).top_level_only


class TestTaxonomyLookups:
    """Categories, tags and slugs."""

    def test_lookup_by_slug(self, make):
        author = make.user()
        post = make.post(author, title="Hello World!")
        tag = make.tag("Machine Learning")

        assert query.get_post(make.store, slug="hello-world") == post
        assert query.get_tag(make.store, slug="machine-learning") == tag
        assert query.get_post(make.store) is None

    def test_categories_roots_and_children(self, make):
        tech = make.category("Tech")
        make.category("Python", parent=tech)
        life = make.category("Life")

        roots = query.list_categories(make.store, roots_only=True)
        children = query.list_categories(make.store, parent_id=tech.id)

        assert _ids(roots) == [tech.id, life.id]
        assert [c.name for c in children] == ["Python"]

    def test_tags_by_name_or_usage(self, make):
        author = make.user()
        zeta, alpha = make.tag("zeta"), make.tag("alpha")
        make.post(author, title="a", tags=[zeta])
        make.post(author, title="b", tags=[zeta])

        assert [t.name for t in query.list_tags(make.store)] == ["alpha", "zeta"]
        assert [t.name for t in query.list_tags(make.store, order_by_usage=True)] == ["zeta", "alpha"]
        assert query.get_tag(make.store, tag_id=alpha.id).usage_count == 0
