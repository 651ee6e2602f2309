"""Test deterministic seeding functionality."""

import random
from collections import Counter
from datetime import datetime, timezone

from faker import Faker

from blog_engine.models import CommentStatus, EntityKind, PostStatus, Role, TargetType, UserStatus
from blog_engine.services.seeder import seed_random_generators, seed_store
from blog_engine.store import Store, index_key


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def seeded(n_users=8, n_posts=12, seed=1337):
    return seed_store(Store(clock=lambda: NOW), n_users=n_users, n_posts=n_posts, seed=seed)


class TestDeterministicSeeding:
    """Test that seeding produces deterministic results."""

    def test_random_seed_deterministic(self):
        """Test that random.seed produces deterministic results."""
        random.seed(1337)
        values1 = [random.randint(1, 100) for _ in range(10)]

        random.seed(1337)
        values2 = [random.randint(1, 100) for _ in range(10)]

        assert values1 == values2

    def test_faker_seed_deterministic(self):
        """Test that Faker.seed_instance produces deterministic results."""
        fake1 = Faker()
        fake1.seed_instance(1337)
        names1 = [fake1.user_name() for _ in range(5)]

        fake2 = Faker()
        fake2.seed_instance(1337)
        names2 = [fake2.user_name() for _ in range(5)]

        assert names1 == names2

    def test_seed_random_generators_function(self):
        """Test that seed_random_generators resets the random module."""
        seed_random_generators()
        random_values1 = [random.randint(1, 100) for _ in range(5)]

        seed_random_generators()
        random_values2 = [random.randint(1, 100) for _ in range(5)]

        assert random_values1 == random_values2

    def test_same_seed_same_store(self):
        """Two stores seeded alike hold identical records."""
        first, second = seeded(), seeded()

        for kind in EntityKind:
            assert first.all(kind) == second.all(kind), kind

    def test_different_seed_different_store(self):
        first, second = seeded(seed=1), seeded(seed=2)
        assert [u.username for u in first.all(EntityKind.user)] != [u.username for u in second.all(EntityKind.user)]


class TestSeededStoreConsistency:
    """Every denormalized counter matches the records it counts."""

    def setup_method(self):
        self.store = seeded(n_users=10, n_posts=20)

    def test_sizes(self):
        assert self.store.count(EntityKind.user) == 10
        assert self.store.count(EntityKind.post) == 20
        assert self.store.count(EntityKind.category) > 0
        assert self.store.count(EntityKind.tag) > 0

    def test_first_user_is_active_admin(self):
        admin = self.store.get(EntityKind.user, "1")
        assert admin.role == Role.admin
        assert admin.status == UserStatus.active

    def test_post_counters(self):
        for post in self.store.all(EntityKind.post):
            assert post.comment_count == self.store.related_count(EntityKind.comment, "post_id", post.id)
            assert post.like_count == self.store.related_count(
                EntityKind.like, "target", index_key(TargetType.post, post.id)
            )

    def test_comment_like_counters(self):
        for comment in self.store.all(EntityKind.comment):
            assert comment.like_count == self.store.related_count(
                EntityKind.like, "target", index_key(TargetType.comment, comment.id)
            )

    def test_tag_usage(self):
        for tag in self.store.all(EntityKind.tag):
            assert tag.usage_count == self.store.related_count(EntityKind.post, "tag_ids", tag.id)

    def test_likes_are_unique(self):
        keys = Counter((l.user_id, l.target_type, l.target_id) for l in self.store.all(EntityKind.like))
        assert all(n == 1 for n in keys.values())

    def test_follows_are_unique_and_not_self(self):
        pairs = [(f.follower_id, f.following_id) for f in self.store.all(EntityKind.follow)]
        assert len(pairs) == len(set(pairs))
        assert all(a != b for a, b in pairs)

    def test_references_resolve(self):
        for post in self.store.all(EntityKind.post):
            assert self.store.get(EntityKind.user, post.author_id) is not None
            assert self.store.get(EntityKind.category, post.category_id) is not None
        for comment in self.store.all(EntityKind.comment):
            assert self.store.get(EntityKind.post, comment.post_id) is not None
            if comment.parent_id is not None:
                parent = self.store.get(EntityKind.comment, comment.parent_id)
                assert parent.post_id == comment.post_id

    def test_published_posts_have_published_at(self):
        for post in self.store.all(EntityKind.post):
            assert (post.published_at is not None) == (post.status == PostStatus.published)

    def test_only_approved_comments_are_liked(self):
        liked = {l.target_id for l in self.store.all(EntityKind.like) if l.target_type == TargetType.comment}
        for comment_id in liked:
            assert self.store.get(EntityKind.comment, comment_id).status == CommentStatus.approved

    def test_new_ids_continue_after_seed(self):
        assert self.store.new_id(EntityKind.post) == "21"
