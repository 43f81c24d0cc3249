"""
MCP adapter for the X command gateway.

``XMCPAdapter`` is the single entry point used by the transport. It validates
a command, dispatches it to the post or media service and renders the outcome
as one text block.

Malformed input (``ValidationError``) and unknown tools (``UnknownCommand``)
are raised so the transport can report them as protocol faults. Every other
failure is normalized and returned in-band with ``is_error`` set.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from x_gateway import formatting
from x_gateway.errors import normalize_error
from x_gateway.exceptions import UnknownCommand, ValidationError
from x_gateway.integrations.schema import (
    CreateThreadRequest,
    GetUserRequest,
    PostTweetRequest,
    SearchTweetsRequest,
    TweetIdRequest,
    UploadMediaRequest,
    UserTimelineRequest,
)
from x_gateway.services.media_service import MediaService
from x_gateway.services.post_service import PostService
from x_gateway.validation import COMMANDS, validate_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Rendered outcome of a command."""

    text: str
    is_error: bool = False


class XMCPAdapter:
    """Adapter between MCP tool calls and the gateway services."""

    def __init__(self, *, post_service: PostService, media_service: MediaService) -> None:
        self.post_service = post_service
        self.media_service = media_service
        self._handlers: dict[str, Callable[[Any], Awaitable[CommandResult]]] = {
            "post_tweet": self.post_tweet,
            "upload_media": self.upload_media,
            "create_thread": self.create_thread,
            "delete_tweet": self.delete_tweet,
            "retweet": self.retweet,
            "unretweet": self.unretweet,
            "get_user": self.get_user,
            "get_user_timeline": self.get_user_timeline,
            "search_tweets": self.search_tweets,
        }

    async def execute(self, name: str, arguments: Mapping[str, Any] | None) -> CommandResult:
        """
        Validate and run one command.

        Raises:
            UnknownCommand: ``name`` is not a registered tool.
            ValidationError: ``arguments`` violate the tool's constraints.
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownCommand(name)
        request = validate_command(name, arguments)

        started = time.perf_counter()
        try:
            result = await handler(request)
        except (ValidationError, UnknownCommand):
            raise
        except Exception as exc:
            error = normalize_error(exc)
            result = CommandResult(formatting.render_error(error), is_error=True)

        logger.info(
            "Tool %s finished in %.3fs%s",
            name,
            time.perf_counter() - started,
            " with error" if result.is_error else "",
        )
        return result

    def get_tool_schemas(self) -> dict[str, dict[str, Any]]:
        """Return description and JSON input schema for every registered tool."""
        return {
            name: {"description": spec.description, "input_schema": spec.input_schema()}
            for name, spec in COMMANDS.items()
        }

    # ------------------------------------------------------------------
    # Post operations
    # ------------------------------------------------------------------

    async def post_tweet(self, request: PostTweetRequest) -> CommandResult:
        step = await self.post_service.create_post(
            request.text,
            in_reply_to=request.reply_to_tweet_id,
            quote_post_id=request.quote_tweet_id,
            media_ids=request.media_ids,
            poll_options=request.poll.options if request.poll else None,
            poll_duration_minutes=request.poll.duration_minutes if request.poll else None,
        )
        return CommandResult(formatting.render_post(step))

    async def create_thread(self, request: CreateThreadRequest) -> CommandResult:
        result = await self.post_service.create_thread(request.tweets)
        return CommandResult(formatting.render_thread(result), is_error=not result.succeeded)

    async def delete_tweet(self, request: TweetIdRequest) -> CommandResult:
        await self.post_service.delete_post(request.tweet_id)
        return CommandResult(formatting.render_confirmation("deleted", request.tweet_id))

    async def retweet(self, request: TweetIdRequest) -> CommandResult:
        await self.post_service.repost(request.tweet_id)
        return CommandResult(formatting.render_confirmation("retweeted", request.tweet_id))

    async def unretweet(self, request: TweetIdRequest) -> CommandResult:
        await self.post_service.undo_repost(request.tweet_id)
        return CommandResult(formatting.render_confirmation("unretweeted", request.tweet_id))

    async def search_tweets(self, request: SearchTweetsRequest) -> CommandResult:
        page = await self.post_service.search_recent(request.query, max_results=request.count)
        return CommandResult(formatting.render_post_page(request.query, page))

    # ------------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------------

    async def get_user(self, request: GetUserRequest) -> CommandResult:
        user = await self.post_service.get_user(username=request.username, user_id=request.user_id)
        return CommandResult(formatting.render_user(user))

    async def get_user_timeline(self, request: UserTimelineRequest) -> CommandResult:
        page = await self.post_service.get_user_timeline(
            request.user_id,
            max_results=request.max_results,
        )
        return CommandResult(formatting.render_post_page(f"User {request.user_id} timeline", page))

    # ------------------------------------------------------------------
    # Media operations
    # ------------------------------------------------------------------

    async def upload_media(self, request: UploadMediaRequest) -> CommandResult:
        result = await self.media_service.upload(request.to_source())
        return CommandResult(formatting.render_media(result))
