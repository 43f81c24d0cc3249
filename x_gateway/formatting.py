"""
Text rendering for command results returned to the calling agent.
"""

from __future__ import annotations

import json
import math
from typing import Any

from x_gateway.exceptions import GatewayError, RateLimitExceeded
from x_gateway.models import MediaUploadResult, PostedStep, PostPage, ThreadResult, User

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a moment before trying again."


def render_post(step: PostedStep) -> str:
    return f"Tweet posted successfully!\nURL: {step.url}"


def render_media(result: MediaUploadResult) -> str:
    return (
        "Media uploaded successfully!\n"
        f"Media ID: {result.media_id}\n"
        f"Size: {result.size} bytes\n\n"
        "Use this media_id in post_tweet with media_ids parameter."
    )


def _render_steps(steps: list[PostedStep]) -> str:
    return "\n\n".join(
        f"{index}. {step.text}\n   URL: {step.url}" for index, step in enumerate(steps, start=1)
    )


def render_thread(result: ThreadResult) -> str:
    """Render a thread outcome; partial threads list what was left posted."""
    if result.succeeded:
        return (
            f"Thread created successfully with {result.completed} tweets!\n\n"
            f"{_render_steps(result.steps)}\n\n"
            f"Thread URL: {result.thread_url}"
        )

    error = result.error
    reason = f"{error.kind}: {error.message}" if error else "unknown failure"
    lines = [
        f"Thread failed at segment {(result.failed_index or 0) + 1}: {reason}",
        f"{result.completed} of {result.total} segments were posted.",
    ]
    if result.steps:
        lines.append("")
        lines.append(_render_steps(result.steps))
        lines.append("")
        lines.append(f"Thread URL: {result.thread_url}")
    return "\n".join(lines)


def render_confirmation(action: str, post_id: str) -> str:
    return f"Tweet {post_id} {action} successfully"


def render_user(user: User) -> str:
    """Render a profile; unverified status and unknown counts are omitted."""
    lines = [
        f"User: @{user.username}",
        f"Name: {user.name or 'N/A'}",
        f"ID: {user.id}",
    ]
    if user.verified:
        lines.append("Verified: Yes")
    for label, value in (
        ("Followers", user.followers_count),
        ("Following", user.following_count),
        ("Tweets", user.tweet_count),
    ):
        if value is not None:
            lines.append(f"{label}: {value:,}")
    return "\n".join(lines)


def format_post_page(query: str, page: PostPage) -> dict[str, Any]:
    """Shape posts and their referenced authors into the search response mapping."""
    tweets = []
    for position, post in enumerate(page.posts, start=1):
        author = page.author_of(post)
        tweets.append(
            {
                "position": position,
                "author": {"username": author.username if author else "unknown"},
                "content": post.text or "",
                "metrics": post.metrics.model_dump(),
                "url": post.url,
            }
        )
    return {"query": query, "count": len(tweets), "tweets": tweets}


def render_post_page(query: str, page: PostPage) -> str:
    return json.dumps(format_post_page(query, page), indent=2, ensure_ascii=False)


def render_error(error: GatewayError) -> str:
    if isinstance(error, RateLimitExceeded):
        if error.retry_after is not None:
            return f"{RATE_LIMIT_MESSAGE} Retry after {math.ceil(error.retry_after)} seconds."
        return RATE_LIMIT_MESSAGE
    return f"{error.kind}: {error.message}"
