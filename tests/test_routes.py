"""
Tests for the HTTP layer: envelopes, status codes and error handlers.
"""

import pytest
from fastapi.testclient import TestClient

from blog_engine.main import create_app
from blog_engine.models import PostStatus


class TestApi:
    """Routes over a small hand-built store."""

    @pytest.fixture
    def blog(self, make):
        alice = make.user("alice", name="Alice")
        bob = make.user("bob", name="Bob")
        python = make.tag("python")
        posts = [
            make.post(alice, title=f"Post {i}", tags=[python], status=PostStatus.published)
            for i in range(1, 4)
        ]
        comment = make.comment(posts[0], bob, content="First!")
        return {"alice": alice, "bob": bob, "tag": python, "posts": posts, "comment": comment}

    @pytest.fixture
    def client(self, store, blog):
        """Create test client."""
        return TestClient(create_app(store=store, seed=False))

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_health_reports_record_counts(self, client):
        response = client.get("/health/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["store"]["records"]["post"] == 3
        assert "version" in data
        assert "timestamp" in data

    def test_post_detail_is_camel_case(self, client, blog):
        response = client.get(f"/posts/{blog['posts'][0].id}")

        assert response.status_code == 200
        data = response.json()
        assert data["authorId"] == blog["alice"].id
        assert data["commentCount"] == 1
        assert data["author"]["username"] == "alice"
        assert [t["name"] for t in data["tags"]] == ["python"]

    def test_missing_post_is_404(self, client):
        response = client.get("/posts/999")
        assert response.status_code == 404

    def test_list_posts_with_filter(self, client, blog):
        response = client.get("/posts", params={"search": "post 2"})

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [blog["posts"][1].id]

    def test_connection_walk(self, client):
        first = client.get("/posts/connection", params={"first": 2}).json()
        second = client.get(
            "/posts/connection", params={"first": 2, "after": first["pageInfo"]["endCursor"]}
        ).json()

        assert len(first["edges"]) == 2
        assert first["pageInfo"]["hasNextPage"] is True
        assert first["pageInfo"]["totalCount"] == 3
        assert len(second["edges"]) == 1
        assert second["pageInfo"]["hasPreviousPage"] is True

    def test_stale_cursor_is_400(self, client):
        response = client.get("/posts/connection", params={"after": "OTk5"})

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "INVALID_CURSOR"
        assert "message" in data

    def test_bad_filter_timestamp_is_422(self, client):
        response = client.get("/posts", params={"published_after": "yesterday-ish"})

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_thread_is_flat_parents_first(self, client, make, blog):
        post = blog["posts"][0]
        reply = make.comment(post, blog["alice"], parent=blog["comment"], content="Thanks")

        data = client.get(f"/posts/{post.id}/thread").json()

        assert data["maxDepth"] == 2
        assert [(c["id"], c["depth"], c["parentId"]) for c in data["comments"]] == [
            (blog["comment"].id, 1, None),
            (reply.id, 2, blog["comment"].id),
        ]
        assert data["comments"][0]["replyCount"] == 1

    def test_thread_with_long_reply_chain(self, client, make, blog):
        post = blog["posts"][1]
        parent = None
        for _ in range(1100):
            parent = make.comment(post, blog["bob"], parent=parent)

        response = client.get(f"/posts/{post.id}/thread")

        assert response.status_code == 200
        data = response.json()
        assert data["maxDepth"] == 1100
        assert data["comments"][-1]["id"] == parent.id

    def test_create_post_with_unknown_author(self, client):
        response = client.post("/posts", json={
            "title": "Ghost", "content": "boo", "authorId": "404", "categoryId": "1",
        })

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "INVALID_REFERENCE"
        assert data["details"]["field"] == "author_id"

    def test_create_and_publish_post(self, client, blog):
        created = client.post("/posts", json={
            "title": "Fresh", "content": "new words", "authorId": blog["bob"].id, "categoryId": "1",
        })
        assert created.status_code == 201
        assert created.json()["status"] == "draft"

        published = client.post(f"/posts/{created.json()['id']}/publish")
        assert published.json()["status"] == "published"
        assert published.json()["publishedAt"] is not None

    def test_like_and_unlike(self, client, blog):
        post_id = blog["posts"][1].id
        bob_id = blog["bob"].id

        client.post(f"/social/posts/{post_id}/like", json={"userId": bob_id})
        client.post(f"/social/posts/{post_id}/like", json={"userId": bob_id})
        assert client.get(f"/posts/{post_id}").json()["likeCount"] == 1
        assert client.get(f"/posts/{post_id}/is-liked-by/{bob_id}").json() == {"isLikedBy": True}

        removed = client.delete(f"/social/posts/{post_id}/like", params={"user_id": bob_id})
        assert removed.json()["success"] is True
        assert client.get(f"/posts/{post_id}").json()["likeCount"] == 0

    def test_self_follow_is_400(self, client, blog):
        alice_id = blog["alice"].id
        response = client.post("/social/follows", json={"followerId": alice_id, "followingId": alice_id})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_follow_shows_in_user_detail(self, client, blog):
        client.post("/social/follows", json={"followerId": blog["bob"].id, "followingId": blog["alice"].id})

        data = client.get(f"/users/{blog['alice'].id}").json()

        assert data["followerCount"] == 1
        assert data["postCount"] == 3

    def test_comment_delete_updates_count(self, client, blog):
        comment_id = blog["comment"].id
        post_id = blog["posts"][0].id

        response = client.delete(f"/comments/{comment_id}")

        assert response.json() == {"success": True, "id": comment_id}
        assert client.get(f"/posts/{post_id}").json()["commentCount"] == 0

    def test_unknown_body_field_is_422(self, client):
        response = client.post("/tags", json={"name": "x", "slug": "x", "colour": "red"})
        assert response.status_code == 422

    def test_merge_tags(self, client, blog):
        target = client.post("/tags", json={"name": "py", "slug": "py"}).json()

        merged = client.post("/tags/merge", json={"sourceId": blog["tag"].id, "targetId": target["id"]})

        assert merged.status_code == 200
        assert merged.json()["usageCount"] == 3
        assert client.get(f"/tags/{blog['tag'].id}").status_code == 404

    def test_category_cycle_is_400(self, client):
        parent = client.post("/categories", json={"name": "Parent", "slug": "parent", "description": "p"}).json()
        child = client.post(
            "/categories",
            json={"name": "Child", "slug": "child", "description": "c", "parentId": parent["id"]},
        ).json()

        response = client.patch(f"/categories/{parent['id']}", json={"parentId": child["id"]})

        assert response.status_code == 400

    def test_search(self, client):
        data = client.get("/search", params={"q": "post", "types": ["posts"]}).json()

        assert len(data["posts"]) == 3
        assert data["totalCount"] == 3
        assert data["users"] == []

    def test_empty_search_is_400(self, client):
        response = client.get("/search", params={"q": " "})
        assert response.status_code == 400

    def test_stats(self, client):
        data = client.get("/stats").json()

        assert data["totalPosts"] == 3
        assert data["publishedPosts"] == 3
        assert data["totalComments"] == 1

    def test_feed(self, client, blog):
        client.post("/social/follows", json={"followerId": blog["bob"].id, "followingId": blog["alice"].id})

        feed = client.get(f"/feed/{blog['bob'].id}").json()

        assert len(feed) == 3

    def test_comment_detail_resolves_post_and_parent(self, client, make, blog):
        post = blog["posts"][0]
        reply = make.comment(post, blog["alice"], parent=blog["comment"], content="Thanks")

        data = client.get(f"/comments/{reply.id}").json()

        assert data["post"]["id"] == post.id
        assert data["parent"]["id"] == blog["comment"].id
        assert data["author"]["username"] == "alice"
        assert client.get(f"/comments/{blog['comment'].id}").json()["parent"] is None

    def test_like_payloads_resolve_user_and_target(self, client, blog):
        post_id = blog["posts"][1].id
        comment_id = blog["comment"].id

        post_like = client.post(f"/social/posts/{post_id}/like", json={"userId": blog["bob"].id}).json()
        comment_like = client.post(
            f"/social/comments/{comment_id}/like", json={"userId": blog["alice"].id}
        ).json()

        assert post_like["user"]["username"] == "bob"
        assert post_like["post"]["id"] == post_id
        assert comment_like["user"]["username"] == "alice"
        assert comment_like["comment"]["id"] == comment_id

    def test_follow_and_bookmark_payloads(self, client, blog):
        follow = client.post(
            "/social/follows", json={"followerId": blog["bob"].id, "followingId": blog["alice"].id}
        ).json()
        bookmark = client.post(
            "/social/bookmarks", json={"userId": blog["bob"].id, "postId": blog["posts"][2].id}
        ).json()

        assert (follow["follower"]["username"], follow["following"]["username"]) == ("bob", "alice")
        assert bookmark["user"]["username"] == "bob"
        assert bookmark["post"]["id"] == blog["posts"][2].id

    def test_notifications_resolve_recipient_actor_and_post(self, client, blog):
        data = client.get("/notifications", params={"user_id": blog["alice"].id}).json()

        assert len(data) == 1
        assert data[0]["user"]["username"] == "alice"
        assert data[0]["relatedUser"]["username"] == "bob"
        assert data[0]["relatedPost"]["id"] == blog["posts"][0].id

    def test_notifications_read_all(self, client, blog):
        alice_id = blog["alice"].id

        unread = client.get("/notifications", params={"user_id": alice_id, "unread_only": True}).json()
        result = client.post("/notifications/read-all", params={"user_id": alice_id}).json()

        assert len(unread) == 1
        assert result == {"count": 1}


class TestUnhandledErrors:
    def test_general_exception_handler(self, store, monkeypatch):
        from blog_engine.services import reports

        def explode(_store):
            raise RuntimeError("boom")

        monkeypatch.setattr(reports, "get_stats", explode)
        client = TestClient(create_app(store=store, seed=False), raise_server_exceptions=False)

        response = client.get("/stats")

        assert response.status_code == 500
        assert response.json()["error_code"] == "INTERNAL_ERROR"
