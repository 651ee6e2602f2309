"""Tests for the typer CLI."""

from typer.testing import CliRunner

from blog_engine.cli import app

runner = CliRunner()


class TestCli:
    """Every command runs against a freshly seeded store."""

    def test_seed(self):
        result = runner.invoke(app, ["seed", "--users", "5", "--posts", "6", "--seed", "7"])

        assert result.exit_code == 0
        assert "Seed complete (seed=7)" in result.output
        assert "post" in result.output

    def test_stats(self):
        result = runner.invoke(app, ["stats", "--users", "5", "--posts", "6"])

        assert result.exit_code == 0
        assert "Blog Statistics" in result.output
        assert "Posts:" in result.output

    def test_posts_by_status(self):
        result = runner.invoke(app, ["posts", "--status", "published", "--sort", "VIEW_COUNT", "--desc", "-l", "3"])

        assert result.exit_code == 0
        assert "published" in result.output
        assert "draft" not in result.output

    def test_search_empty_query_fails(self):
        result = runner.invoke(app, ["search", "  "])

        assert result.exit_code == 1

    def test_search(self):
        result = runner.invoke(app, ["search", "python", "--type", "tags"])

        assert result.exit_code == 0
        assert "#python" in result.output

    def test_trending(self):
        result = runner.invoke(app, ["trending", "--limit", "3"])

        assert result.exit_code == 0
        assert "trending posts" in result.output

    def test_user_stats(self):
        result = runner.invoke(app, ["user-stats", "1"])

        assert result.exit_code == 0
        assert "Followers:" in result.output

    def test_user_stats_unknown_user(self):
        result = runner.invoke(app, ["user-stats", "9999"])

        assert result.exit_code == 1

    def test_thread(self):
        result = runner.invoke(app, ["thread", "--post", "1", "--show"])

        assert result.exit_code == 0
        assert "Comment Thread for Post 1" in result.output

    def test_thread_unknown_post(self):
        result = runner.invoke(app, ["thread", "-p", "9999"])

        assert result.exit_code == 1
