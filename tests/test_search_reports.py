"""Tests for search, statistics, feed, trending and comment threads."""

from datetime import datetime, timezone

import pytest

from blog_engine.errors import InvalidInputError
from blog_engine.models import EntityKind, PostStatus
from blog_engine.schemas import CreateAuditLogInput, CreateMediaInput, UpdateMediaInput
from blog_engine.services import audit, comments, media, posts, query, relations, reports, search, social, trending


class TestSearch:
    """Case-insensitive substring search per type."""

    @pytest.fixture
    def content(self, make, store):
        author = make.user("graphdev", name="Grace Hopper")
        live = make.post(author, title="Intro to GraphQL", status=PostStatus.published)
        make.post(author, title="GraphQL draft")
        approved = make.comment(live, author, content="graphql rocks")
        comments.approve_comment(store, approved.id)
        make.comment(live, author, content="graphql pending")
        tag = make.tag("GraphQL")
        return {"post": live, "comment": approved, "tag": tag, "user": author}

    def test_matches_each_type(self, store, content):
        result = search.search(store, "GRAPH")

        assert [p.id for p in result.posts] == [content["post"].id]
        assert [c.id for c in result.comments] == [content["comment"].id]
        assert [t.id for t in result.tags] == [content["tag"].id]
        assert [u.id for u in result.users] == [content["user"].id]
        assert result.total_count == 4

    def test_restrict_types(self, store, content):
        result = search.search(store, "graphql", types=["tags"])

        assert result.posts == []
        assert len(result.tags) == 1

    def test_limit_per_type(self, make, store):
        author = make.user()
        for i in range(3):
            make.post(author, title=f"python {i}", status=PostStatus.published)

        result = search.search(store, "python", limit=2)

        assert [p.title for p in result.posts] == ["python 0", "python 1"]

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty_query_rejected(self, store, text):
        with pytest.raises(InvalidInputError):
            search.search(store, text)

    def test_surrounding_spaces_are_part_of_the_query(self, make, store):
        author = make.user("writer", name="Writer")
        make.post(author, title="Learning ai tools", status=PostStatus.published)
        make.post(author, title="Repairing a chair", status=PostStatus.published)

        result = search.search(store, " ai", types=["posts"])

        assert [p.title for p in result.posts] == ["Learning ai tools"]

    def test_empty_type_list_searches_nothing(self, store, content):
        result = search.search(store, "graph", types=[])

        assert result.total_count == 0

    def test_unknown_type_rejected(self, store):
        with pytest.raises(InvalidInputError):
            search.search(store, "x", types=["videos"])

    def test_negative_limit_rejected(self, store):
        with pytest.raises(InvalidInputError):
            search.search(store, "x", limit=-1)


class TestStats:
    def test_global_stats(self, make, store):
        author, reader = make.user(), make.user()
        live = make.post(author, title="live", status=PostStatus.published)
        make.post(author, title="draft")
        make.comment(live, reader)
        social.like_post(store, live.id, reader.id)
        posts.increment_view_count(store, live.id)
        make.tag("python")

        stats = reports.get_stats(store)

        assert stats.total_users == 2
        assert stats.total_posts == 2
        assert stats.published_posts == 1
        assert stats.draft_posts == 1
        assert stats.total_comments == 1
        assert stats.total_categories == 1
        assert stats.total_tags == 1
        assert stats.total_views == 1
        assert stats.total_likes == 1

    def test_user_stats(self, make, store):
        author, reader = make.user(), make.user()
        post = make.post(author, status=PostStatus.published)
        social.like_post(store, post.id, reader.id)
        social.follow_user(store, reader.id, author.id)
        make.comment(post, reader)

        author_stats = reports.get_user_stats(store, author.id)
        reader_stats = reports.get_user_stats(store, reader.id)

        assert (author_stats.post_count, author_stats.follower_count, author_stats.total_likes) == (1, 1, 1)
        assert (reader_stats.comment_count, reader_stats.following_count) == (1, 1)
        assert reports.get_user_stats(store, "404") is None

    def test_category_post_counts(self, make, store):
        tech, food = make.category("Tech"), make.category("Food")
        author = make.user()
        make.post(author, title="a", category=tech, status=PostStatus.published)
        make.post(author, title="b", category=tech)

        rows = reports.category_post_counts(store)

        assert rows == [
            {"category_id": tech.id, "name": "Tech", "post_count": 1},
            {"category_id": food.id, "name": "Food", "post_count": 0},
        ]


class TestFeedAndRanking:
    def test_feed_shows_followed_authors_newest_first(self, make, store, clock):
        reader, followed, stranger = make.user(), make.user(), make.user()
        social.follow_user(store, reader.id, followed.id)
        clock.set(datetime(2024, 1, 1, tzinfo=timezone.utc))
        older = make.post(followed, title="older", status=PostStatus.published)
        clock.set(datetime(2024, 2, 1, tzinfo=timezone.utc))
        newer = make.post(followed, title="newer", status=PostStatus.published)
        make.post(followed, title="draft")
        make.post(stranger, title="stranger", status=PostStatus.published)

        feed = trending.get_feed(store, reader.id)

        assert [p.id for p in feed] == [newer.id, older.id]
        assert trending.get_feed(store, stranger.id) == []

    def test_trending_weights_likes(self, make, store):
        author, fan = make.user(), make.user()
        viewed = make.post(author, title="viewed", status=PostStatus.published)
        liked = make.post(author, title="liked", status=PostStatus.published)
        hidden = make.post(author, title="hidden")
        for _ in range(5):
            posts.increment_view_count(store, viewed.id)
            posts.increment_view_count(store, hidden.id)
        social.like_post(store, liked.id, fan.id)

        ranked = trending.get_trending(store)

        assert [p.id for p in ranked] == [liked.id, viewed.id]
        assert trending.engagement_score(ranked[0]) == 10

    def test_recommended_follows_bookmarked_categories(self, make, store):
        reader, author = make.user(), make.user()
        tech, food = make.category("Tech"), make.category("Food")
        saved = make.post(author, title="saved", category=tech, status=PostStatus.published)
        similar = make.post(author, title="similar", category=tech, status=PostStatus.published)
        make.post(author, title="other", category=food, status=PostStatus.published)
        social.bookmark_post(store, reader.id, saved.id)

        assert [p.id for p in trending.get_recommended(store, reader.id)] == [similar.id]

    def test_recommended_falls_back_to_most_liked(self, make, store):
        author, fan = make.user(), make.user()
        plain = make.post(author, title="plain", status=PostStatus.published)
        liked = make.post(author, title="liked", status=PostStatus.published)
        social.like_post(store, liked.id, fan.id)

        assert [p.id for p in trending.get_recommended(store)] == [liked.id, plain.id]

    def test_related_posts(self, make, store):
        author, fan = make.user(), make.user()
        tech, food = make.category("Tech"), make.category("Food")
        python = make.tag("python")
        post = make.post(author, title="base", category=tech, tags=[python], status=PostStatus.published)
        same_category = make.post(author, title="cat", category=tech, status=PostStatus.published)
        same_tag = make.post(author, title="tag", category=food, tags=[python], status=PostStatus.published)
        make.post(author, title="unrelated", category=food, status=PostStatus.published)
        make.post(author, title="draft", category=tech)
        social.like_post(store, same_tag.id, fan.id)

        related = relations.related_posts(store, post)

        assert [p.id for p in related] == [same_tag.id, same_category.id]


class TestCommentThread:
    def test_thread_depth(self, make, store, clock):
        author = make.user()
        post = make.post(author)
        first = make.comment(post, author, content="first")
        clock.advance(minutes=1)
        reply = make.comment(post, author, parent=first, content="reply")
        clock.advance(minutes=1)
        make.comment(post, author, parent=reply, content="nested")
        clock.advance(minutes=1)
        second = make.comment(post, author, content="second")

        thread = relations.comment_thread(store, post.id)

        assert [node.comment.id for node in thread.roots] == [first.id, second.id]
        assert thread.max_depth == 3
        assert thread.total_comments == 4
        assert thread.total_replies == 2
        assert thread.roots[0].replies[0].replies[0].depth == 3

    def test_long_reply_chain(self, make, store):
        author = make.user()
        post = make.post(author)
        parent = None
        for _ in range(1100):
            parent = make.comment(post, author, parent=parent)

        thread = relations.comment_thread(store, post.id)
        nodes = list(thread.walk())

        assert thread.max_depth == 1100
        assert thread.total_replies == 1099
        assert [node.depth for node in nodes] == list(range(1, 1101))
        assert nodes[-1].comment == parent

    def test_empty_and_missing(self, make, store):
        post = make.post(make.user())

        thread = relations.comment_thread(store, post.id)

        assert (thread.max_depth, thread.total_comments, thread.roots) == (0, 0, [])
        assert relations.comment_thread(store, "404") is None

    def test_replies_and_post_comments(self, make, store, clock):
        author = make.user()
        post = make.post(author)
        root = make.comment(post, author)
        clock.advance(minutes=1)
        early = make.comment(post, author, parent=root)
        clock.advance(minutes=1)
        late = make.comment(post, author, parent=root)

        assert [c.id for c in relations.comment_replies(store, root)] == [early.id, late.id]
        assert relations.comment_reply_count(store, root) == 2
        assert [c.id for c in relations.post_comments(store, post)] == [root.id]
        assert relations.comment_parent(store, early) == root


class TestMediaAndAudit:
    def test_media_lifecycle(self, make, store):
        uploader = make.user()
        item = media.create_media(store, CreateMediaInput(
            uploader_id=uploader.id, filename="cat.jpg", mime_type="image/jpeg", size=1024,
            url="https://cdn.example.com/cat.jpg",
        ))

        renamed = media.update_media(store, item.id, UpdateMediaInput(alt="A cat"))

        assert renamed.alt == "A cat"
        assert renamed.filename == "cat.jpg"
        assert relations.media_uploader(store, renamed) == uploader
        assert query.list_media(store, uploader_id=uploader.id) == [renamed]
        assert media.delete_media(store, item.id).success
        assert store.count(EntityKind.media) == 0

    def test_audit_trail(self, make, store, clock):
        admin = make.user()
        post = make.post(admin)
        audit.record_audit(store, CreateAuditLogInput(
            user_id=admin.id, action="post.create", entity_type="post", entity_id=post.id,
            new_value=audit.snapshot(post),
        ))
        clock.advance(minutes=5)
        latest = audit.record_audit(store, CreateAuditLogInput(
            user_id=admin.id, action="post.publish", entity_type="post", entity_id=post.id,
        ))

        logs = query.list_audit_logs(store, entity_type="post", entity_id=post.id)

        assert logs[0] == latest
        assert '"title": "Hello world"' in logs[1].new_value
        assert relations.audit_log_user(store, latest) == admin
