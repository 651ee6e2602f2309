# blog_engine/cli.py
import logging
from typing import List, Optional

import typer

from blog_engine.config import LOG_LEVEL, SEED_POSTS, SEED_RANDOM, SEED_USERS
from blog_engine.errors import EngineError
from blog_engine.models import EntityKind, PostStatus
from blog_engine.schemas import PostFilter, PostSort, PostSortField, SortDirection
from blog_engine.services import query, relations, reports, search, seeder, trending
from blog_engine.store import Store

app = typer.Typer(help="Blog engine CLI with subcommands")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level")):
    """Inspect a freshly seeded in-memory blog store."""
    logging.basicConfig(level=logging.DEBUG if verbose else LOG_LEVEL)


def build_store(users: int = SEED_USERS, posts: int = SEED_POSTS, seed: int = SEED_RANDOM) -> Store:
    return seeder.seed_store(Store(), n_users=users, n_posts=posts, seed=seed)


@app.command("seed")
def seed_cmd(
    users: int = typer.Option(SEED_USERS, help="Number of users", min=0),
    posts: int = typer.Option(SEED_POSTS, help="Number of posts", min=0),
    seed: int = typer.Option(SEED_RANDOM, help="Random seed"),
):
    """Seed a store and report what it holds."""
    store = build_store(users, posts, seed)

    typer.echo(f"Seed complete (seed={seed}):")
    typer.echo("─" * 30)
    for kind in EntityKind:
        typer.echo(f"{kind.value:<14} {store.count(kind):>6,}")


@app.command("stats")
def stats_cmd(
    users: int = typer.Option(SEED_USERS, help="Number of seeded users", min=0),
    posts: int = typer.Option(SEED_POSTS, help="Number of seeded posts", min=0),
):
    """Show global content statistics."""
    stats = reports.get_stats(build_store(users, posts))

    typer.echo("\n📊 Blog Statistics:")
    typer.echo("─" * 30)
    typer.echo(f"Users:           {stats.total_users:,}")
    typer.echo(f"Posts:           {stats.total_posts:,}")
    typer.echo(f"  published:     {stats.published_posts:,}")
    typer.echo(f"  drafts:        {stats.draft_posts:,}")
    typer.echo(f"Comments:        {stats.total_comments:,}")
    typer.echo(f"Categories:      {stats.total_categories:,}")
    typer.echo(f"Tags:            {stats.total_tags:,}")
    typer.echo(f"Total views:     {stats.total_views:,}")
    typer.echo(f"Total likes:     {stats.total_likes:,}")


@app.command("posts")
def posts_cmd(
    status: Optional[PostStatus] = typer.Option(None, "--status", "-s", help="Only posts with this status"),
    text: Optional[str] = typer.Option(None, "--search", help="Substring of title, content or excerpt"),
    sort: Optional[PostSortField] = typer.Option(None, "--sort", help="Sort field (default: newest first)"),
    desc: bool = typer.Option(False, "--desc", help="Sort descending"),
    limit: int = typer.Option(10, "--limit", "-l", help="Number of posts to show (1-100)", min=1, max=100),
):
    """List posts with optional filter and sort."""
    try:
        store = build_store()
        post_filter = PostFilter(status=status, search=text)
        post_sort = None
        if sort is not None:
            post_sort = PostSort(field=sort, direction=SortDirection.DESC if desc else SortDirection.ASC)
        found = query.list_posts(store, limit=limit, post_filter=post_filter, sort=post_sort)
    except EngineError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1)

    if not found:
        typer.echo("No posts match")
        return

    typer.echo(f"{'ID':<5} {'Status':<10} {'Views':>6} {'Likes':>6}  Title")
    typer.echo("─" * 70)
    for post in found:
        typer.echo(f"{post.id:<5} {post.status.value:<10} {post.view_count:>6,} {post.like_count:>6,}  {post.title}")


@app.command("search")
def search_cmd(
    text: str = typer.Argument(..., help="Text to search for"),
    types: Optional[List[str]] = typer.Option(None, "--type", "-t", help="posts, users, comments or tags"),
):
    """Search posts, users, comments and tags."""
    try:
        result = search.search(build_store(), text, types=types or None)
    except EngineError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1)

    typer.echo(f"\n🔎 {result.total_count} result(s) for '{text}':")
    typer.echo("─" * 50)
    for post in result.posts:
        typer.echo(f"post     {post.id:<5} {post.title}")
    for user in result.users:
        typer.echo(f"user     {user.id:<5} @{user.username} ({user.name})")
    for comment in result.comments:
        typer.echo(f"comment  {comment.id:<5} {comment.content[:60]}")
    for tag in result.tags:
        typer.echo(f"tag      {tag.id:<5} #{tag.name}")


@app.command("trending")
def trending_cmd(
    limit: int = typer.Option(10, "--limit", "-l", help="Number of posts to show (1-100)", min=1, max=100),
):
    """Show published posts ranked by views + 10 x likes."""
    ranked = trending.get_trending(build_store(), limit=limit)

    if not ranked:
        typer.echo("No published posts")
        return

    typer.echo(f"\n🔥 Top {len(ranked)} trending posts:")
    typer.echo("─" * 70)
    for i, post in enumerate(ranked, 1):
        score = trending.engagement_score(post)
        typer.echo(f"{i:2d}. {post.title[:45]:<45} (score {score:,})")


@app.command("user-stats")
def user_stats_cmd(user_id: str = typer.Argument(..., help="User ID")):
    """Show activity statistics for one user."""
    store = build_store()
    stats = reports.get_user_stats(store, user_id)
    if stats is None:
        typer.echo(f"❌ User {user_id} not found", err=True)
        raise typer.Exit(1)

    user = query.get_user(store, user_id=user_id)
    typer.echo(f"\n👤 @{user.username}:")
    typer.echo("─" * 30)
    typer.echo(f"Posts:       {stats.post_count:,}")
    typer.echo(f"Comments:    {stats.comment_count:,}")
    typer.echo(f"Followers:   {stats.follower_count:,}")
    typer.echo(f"Following:   {stats.following_count:,}")
    typer.echo(f"Views:       {stats.total_views:,}")
    typer.echo(f"Likes:       {stats.total_likes:,}")


@app.command("thread")
def thread_cmd(
    post_id: str = typer.Option(..., "--post", "-p", help="Post ID to analyze"),
    show: bool = typer.Option(False, "--show", help="Print the reply tree"),
):
    """Analyze the comment thread of a post."""
    thread = relations.comment_thread(build_store(), post_id)
    if thread is None:
        typer.echo(f"❌ Post {post_id} not found", err=True)
        raise typer.Exit(1)

    typer.echo(f"\n📊 Comment Thread for Post {post_id}:")
    typer.echo("─" * 50)
    typer.echo(f"Max depth:              {thread.max_depth}")
    typer.echo(f"Total comments:         {thread.total_comments:,}")
    typer.echo(f"Total replies:          {thread.total_replies:,}")

    if thread.total_comments == 0:
        typer.echo("\n💬 No comments found for this post")
    elif thread.max_depth == 1:
        typer.echo("\n💬 All comments are top-level (no nested replies)")
    else:
        typer.echo(f"\n💬 Comments have {thread.max_depth} levels of nesting")

    if show:
        for node in thread.walk():
            indent = "  " * node.depth
            typer.echo(f"{indent}#{node.comment.id} {node.comment.content[:50]}")


if __name__ == "__main__":
    app()
