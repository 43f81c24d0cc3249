"""
Post, user and thread workflows built on top of client adapters.

Every remote call is admitted by the local rate limiter first and runs in a
worker thread, so the event loop keeps serving other commands while tweepy
blocks. Failures leave this module already normalized.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Protocol, Sequence, TypeVar

from x_gateway.errors import normalize_error
from x_gateway.exceptions import GatewayError, NotFound, UpstreamError
from x_gateway.models import (
    Post,
    PostDeleteResult,
    PostedStep,
    PostPage,
    RetweetResult,
    ThreadResult,
    User,
)
from x_gateway.rate_limit import (
    POSTS_CREATE,
    POSTS_DELETE,
    POSTS_SEARCH,
    RETWEETS_CREATE,
    RETWEETS_DELETE,
    USERS_BY_ID,
    USERS_BY_USERNAME,
    USERS_TIMELINE,
    RateLimiter,
)

logger = logging.getLogger(__name__)

DEFAULT_THREAD_PACING = 1.0

T = TypeVar("T")

EventHook = Callable[[str, dict[str, Any]], None]


class PostClient(Protocol):
    """Protocol subset consumed by the service."""

    def create_post(self, **kwargs: Any) -> Any:
        ...

    def delete_post(self, post_id: str) -> Any:
        ...

    def repost(self, post_id: str) -> Any:
        ...

    def undo_repost(self, post_id: str) -> Any:
        ...

    def get_user(self, *, user_id: str | None = None, username: str | None = None) -> Any:
        ...

    def get_user_posts(self, user_id: str, *, max_results: int) -> Any:
        ...

    def search_recent_posts(self, query: str, *, max_results: int) -> Any:
        ...


@dataclass(slots=True)
class PostService:
    """High level orchestration for posts, threads and user lookups."""

    client: PostClient
    limiter: RateLimiter = field(default_factory=RateLimiter)
    thread_pacing: float = DEFAULT_THREAD_PACING
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)
    event_hook: EventHook | None = None

    async def create_post(
        self,
        text: str,
        *,
        in_reply_to: str | None = None,
        quote_post_id: str | None = None,
        media_ids: Iterable[str] | None = None,
        poll_options: Sequence[str] | None = None,
        poll_duration_minutes: int | None = None,
    ) -> PostedStep:
        self._emit("post.create.start", {"length": len(text)})
        try:
            step = await self._post(
                text,
                in_reply_to=in_reply_to,
                quote_post_id=quote_post_id,
                media_ids=list(media_ids) if media_ids else None,
                poll_options=list(poll_options) if poll_options else None,
                poll_duration_minutes=poll_duration_minutes,
            )
        except GatewayError as error:
            self._emit("post.create.error", {"kind": error.kind, "message": error.message})
            raise
        self._emit("post.create.success", {"id": step.id})
        logger.info("Tweet posted successfully with ID: %s", step.id)
        return step

    async def create_thread(self, segments: Sequence[str]) -> ThreadResult:
        """
        Post ``segments`` in order, each replying to the previous one.

        Stops at the first failure. Posted segments are left in place and the
        returned result carries the failed index and normalized error.
        """
        result = ThreadResult(total=len(segments))
        previous_id: str | None = None
        self._emit("post.thread.start", {"segments": len(segments)})

        for index, text in enumerate(segments):
            if index > 0 and self.thread_pacing > 0:
                await self.sleep(self.thread_pacing)
            try:
                step = await self._post(text, in_reply_to=previous_id)
            except GatewayError as error:
                result.failed_index = index
                result.error = error
                logger.warning(
                    "Thread stopped at segment %d of %d: %s",
                    index + 1,
                    result.total,
                    error.message,
                )
                self._emit(
                    "post.thread.error",
                    {"index": index, "completed": result.completed, "kind": error.kind},
                )
                return result

            result.steps.append(step)
            previous_id = step.id
            self._emit("post.thread.segment_success", {"index": index, "id": step.id})

        self._emit("post.thread.success", {"count": result.completed})
        logger.info("Thread created successfully with %d tweets", result.completed)
        return result

    async def delete_post(self, post_id: str) -> bool:
        response = await self._call(POSTS_DELETE, self.client.delete_post, post_id)
        if not _parse(PostDeleteResult.from_api, response).deleted:
            raise UpstreamError(f"Unable to delete tweet '{post_id}'.")
        logger.info("Tweet %s deleted successfully", post_id)
        return True

    async def repost(self, post_id: str) -> RetweetResult:
        response = await self._call(RETWEETS_CREATE, self.client.repost, post_id)
        result = _parse(RetweetResult.from_api, response)
        if not result.retweeted:
            raise UpstreamError(f"Unable to retweet '{post_id}'.")
        return result

    async def undo_repost(self, post_id: str) -> RetweetResult:
        response = await self._call(RETWEETS_DELETE, self.client.undo_repost, post_id)
        result = _parse(RetweetResult.from_api, response)
        if result.retweeted:
            raise UpstreamError(f"Unable to undo retweet of '{post_id}'.")
        return result

    async def get_user(self, *, username: str | None = None, user_id: str | None = None) -> User:
        if username:
            response = await self._call(USERS_BY_USERNAME, self.client.get_user, username=username)
        else:
            response = await self._call(USERS_BY_ID, self.client.get_user, user_id=user_id)

        data = response.get("data") if isinstance(response, dict) else getattr(response, "data", None)
        if not data:
            raise NotFound(
                f"User not found: {username or user_id}",
                upstream_code="user_not_found",
                upstream_status=404,
            )
        return _parse(User.from_api, data)

    async def get_user_timeline(self, user_id: str, *, max_results: int = 10) -> PostPage:
        response = await self._call(
            USERS_TIMELINE,
            self.client.get_user_posts,
            user_id,
            max_results=max_results,
        )
        return _parse(PostPage.from_api, response)

    async def search_recent(self, query: str, *, max_results: int = 10) -> PostPage:
        response = await self._call(
            POSTS_SEARCH,
            self.client.search_recent_posts,
            query,
            max_results=max_results,
        )
        page = _parse(PostPage.from_api, response)
        logger.info("Fetched %d tweets for query: %r", len(page.posts), query)
        return page

    async def _post(self, text: str, **options: Any) -> PostedStep:
        payload = {key: value for key, value in options.items() if value is not None}
        response = await self._call(POSTS_CREATE, self.client.create_post, text=text, **payload)
        return PostedStep.from_post(_parse(Post.from_api, response), fallback_text=text)

    async def _call(self, endpoint: str, method: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        self.limiter.admit(endpoint)
        try:
            return await asyncio.to_thread(method, *args, **kwargs)
        except Exception as exc:
            raise normalize_error(exc) from exc

    def _emit(self, name: str, payload: dict[str, Any]) -> None:
        if self.event_hook is not None:
            self.event_hook(name, payload)


def _parse(parser: Callable[[Any], T], payload: Any) -> T:
    """Parse a successful response, normalizing any shape mismatch."""
    try:
        return parser(payload)
    except Exception as exc:
        raise normalize_error(exc) from exc
