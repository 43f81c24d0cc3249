"""
MCP (Model Context Protocol) input schemas for the gateway commands.

Each request model is the typed projection of one command's payload. Field
level constraints live here; rules spanning several fields are declared next
to the model in the command registry (``x_gateway.validation``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StringConstraints

from x_gateway.models import MediaKind

MAX_POST_LENGTH = 280
MAX_MEDIA_IDS = 4
MAX_ALT_TEXT_LENGTH = 1000
MAX_POLL_OPTION_LENGTH = 25

PostText = Annotated[str, StringConstraints(min_length=1, max_length=MAX_POST_LENGTH)]
PollOption = Annotated[str, StringConstraints(min_length=1, max_length=MAX_POLL_OPTION_LENGTH)]


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ============================================================================
# Post Operations
# ============================================================================


class PollRequest(_Request):
    """Poll attached to a post."""

    options: list[PollOption] = Field(
        ...,
        description="Array of poll option labels (2-4 options)",
        min_length=2,
        max_length=4,
    )
    duration_minutes: int = Field(
        ...,
        description="Poll duration in minutes (5-10080)",
        ge=5,
        le=10080,
    )


class PostTweetRequest(_Request):
    """Request schema for posting a tweet."""

    text: str = Field(
        ...,
        description="The content of your tweet",
        min_length=1,
        max_length=MAX_POST_LENGTH,
    )
    reply_to_tweet_id: str | None = Field(
        None,
        description="Optional: ID of the tweet to reply to",
        validation_alias=AliasChoices("reply_to_tweet_id", "reply_to_id"),
    )
    quote_tweet_id: str | None = Field(
        None,
        description="Optional: ID of the tweet to quote",
        validation_alias=AliasChoices("quote_tweet_id", "quote_id"),
    )
    media_ids: list[str] | None = Field(
        None,
        description="Optional: Array of media IDs (max 4) from upload_media",
        max_length=MAX_MEDIA_IDS,
    )
    poll: PollRequest | None = Field(
        None,
        description="Optional: Poll options (cannot be used with media)",
    )


class CreateThreadRequest(_Request):
    """Request schema for posting a thread."""

    tweets: list[PostText] = Field(
        ...,
        description="Array of tweet texts (2-25 tweets)",
        min_length=2,
        max_length=25,
    )


class TweetIdRequest(_Request):
    """Request schema for commands addressing one tweet."""

    tweet_id: str = Field(..., description="ID of the tweet", min_length=1)


class SearchTweetsRequest(_Request):
    """Request schema for searching recent tweets."""

    query: str = Field(..., description="Search query", min_length=1)
    count: int = Field(
        10,
        description="Number of tweets to return (10-100)",
        ge=10,
        le=100,
    )


# ============================================================================
# User Operations
# ============================================================================


class GetUserRequest(_Request):
    """Request schema for looking up a user by username or ID."""

    username: str | None = Field(None, description="Username (without @)", min_length=1)
    user_id: str | None = Field(None, description="User ID", min_length=1)


class UserTimelineRequest(_Request):
    """Request schema for reading a user's timeline."""

    user_id: str = Field(..., description="ID of the user", min_length=1)
    max_results: int = Field(
        10,
        description="Number of tweets to return",
        ge=5,
        le=100,
    )


# ============================================================================
# Media Operations
# ============================================================================


@dataclass(frozen=True, slots=True)
class LocalPathSource:
    path: str


@dataclass(frozen=True, slots=True)
class RemoteUrlSource:
    url: str


@dataclass(frozen=True, slots=True)
class InlineBase64Source:
    data: str


SourceLocator = Union[LocalPathSource, RemoteUrlSource, InlineBase64Source]


@dataclass(frozen=True, slots=True)
class MediaSource:
    """Exactly one locator plus the optional declared kind and alt text."""

    locator: SourceLocator
    declared_kind: MediaKind | None = None
    alt_text: str | None = None


class UploadMediaRequest(_Request):
    """Request schema for uploading media from a path, a URL, or base64 data."""

    file_path: str | None = Field(None, description="Path to local media file", min_length=1)
    file_url: str | None = Field(
        None,
        description="URL to download media from",
        pattern=r"^https?://\S+$",
    )
    file_base64: str | None = Field(None, description="Base64-encoded media data", min_length=1)
    media_type: Literal["image", "video", "gif"] | None = Field(
        None,
        description="Type of media (auto-detected if not provided)",
    )
    alt_text: str | None = Field(
        None,
        description="Optional: Alt text for accessibility",
        max_length=MAX_ALT_TEXT_LENGTH,
    )

    def to_source(self) -> MediaSource:
        locator: SourceLocator
        if self.file_path is not None:
            locator = LocalPathSource(self.file_path)
        elif self.file_url is not None:
            locator = RemoteUrlSource(self.file_url)
        elif self.file_base64 is not None:
            locator = InlineBase64Source(self.file_base64)
        else:
            raise ValueError("One of file_path, file_url, or file_base64 is required.")
        return MediaSource(locator=locator, declared_kind=self.media_type, alt_text=self.alt_text)
