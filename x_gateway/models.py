"""
Pydantic models for X (Twitter) API responses and gateway results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from x_gateway.exceptions import GatewayError

MediaKind = Literal["image", "video", "gif"]

STATUS_URL_TEMPLATE = "https://twitter.com/status/{post_id}"


def post_url(post_id: str) -> str:
    return STATUS_URL_TEMPLATE.format(post_id=post_id)


def _to_mapping(payload: Any) -> Mapping[str, Any]:
    if isinstance(payload, Mapping):
        # Raw v2 JSON bodies wrap the object in a top-level "data" key.
        inner = payload.get("data")
        if isinstance(inner, Mapping) and "id" not in payload:
            return _to_mapping(inner)
        return payload if isinstance(payload, dict) else dict(payload)
    raw_json = getattr(payload, "_json", None)
    if isinstance(raw_json, Mapping):
        return raw_json
    if hasattr(payload, "data"):
        return _to_mapping(payload.data)
    if hasattr(payload, "__dict__"):
        return _to_mapping(vars(payload))
    raise TypeError(f"Cannot convert payload of type {type(payload)!r} to mapping.")


def _coerce_id(value: Any) -> Any:
    # tweepy's Tweet and User objects expose numeric ids as int.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _to_list(payload: Any) -> list[Any]:
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    return [payload]


class PostMetrics(BaseModel):
    likes: int = 0
    retweets: int = 0
    replies: int = 0
    quotes: int = 0

    @classmethod
    def from_public_metrics(cls, metrics: Mapping[str, Any] | None) -> "PostMetrics":
        metrics = metrics or {}
        return cls(
            likes=metrics.get("like_count") or 0,
            retweets=metrics.get("retweet_count") or 0,
            replies=metrics.get("reply_count") or 0,
            quotes=metrics.get("quote_count") or 0,
        )


class Post(BaseModel):
    """Normalized representation of a post."""

    id: str
    text: str | None = None
    author_id: str | None = None
    created_at: datetime | None = None
    public_metrics: dict[str, int] | None = None

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_api(cls, payload: Any) -> "Post":
        return cls.model_validate(_to_mapping(payload))

    @field_validator("id", "author_id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _coerce_id(value)

    @property
    def url(self) -> str:
        return post_url(self.id)

    @property
    def metrics(self) -> PostMetrics:
        return PostMetrics.from_public_metrics(self.public_metrics)


class PostedStep(BaseModel):
    """One successfully posted segment of a thread, or a single post."""

    id: str
    text: str
    url: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_post(cls, post: Post, *, fallback_text: str = "") -> "PostedStep":
        return cls(id=post.id, text=post.text or fallback_text, url=post.url)


class PostDeleteResult(BaseModel):
    """Represents the outcome of a delete post call."""

    deleted: bool

    @classmethod
    def from_api(cls, payload: Any) -> "PostDeleteResult":
        return cls.model_validate(_to_mapping(payload))


class RetweetResult(BaseModel):
    """Represents the outcome of a retweet or unretweet call."""

    retweeted: bool

    @classmethod
    def from_api(cls, payload: Any) -> "RetweetResult":
        return cls.model_validate(_to_mapping(payload))


class User(BaseModel):
    """Normalized user profile."""

    id: str
    username: str
    name: str | None = None
    verified: bool | None = None
    public_metrics: dict[str, int] | None = None

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_api(cls, payload: Any) -> "User":
        return cls.model_validate(_to_mapping(payload))

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Any:
        return _coerce_id(value)

    @property
    def followers_count(self) -> int | None:
        return (self.public_metrics or {}).get("followers_count")

    @property
    def following_count(self) -> int | None:
        return (self.public_metrics or {}).get("following_count")

    @property
    def tweet_count(self) -> int | None:
        return (self.public_metrics or {}).get("tweet_count")


class PostPage(BaseModel):
    """Posts returned by a search or timeline call, with their authors."""

    posts: list[Post]
    users: list[User]

    @classmethod
    def from_api(cls, response: Any) -> "PostPage":
        if isinstance(response, Mapping):
            data, includes = response.get("data"), response.get("includes")
        else:
            data = getattr(response, "data", None)
            includes = getattr(response, "includes", None)
        users = includes.get("users") if isinstance(includes, Mapping) else None
        return cls(
            posts=[Post.from_api(item) for item in _to_list(data)],
            users=[User.from_api(item) for item in _to_list(users)],
        )

    def author_of(self, post: Post) -> User | None:
        for user in self.users:
            if user.id == post.author_id:
                return user
        return None


class MediaUploadResult(BaseModel):
    """Normalized response from the media upload endpoint."""

    media_id: str
    size: int = 0
    kind: MediaKind = "image"

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_api(cls, payload: Any, **extra: Any) -> "MediaUploadResult":
        mapping = dict(_to_mapping(payload))
        mapping.setdefault("media_id", mapping.get("media_id_string"))
        mapping.update(extra)
        return cls.model_validate(mapping)

    @field_validator("media_id", mode="before")
    @classmethod
    def coerce_media_id(cls, value: Any) -> str:
        if isinstance(value, (int, float)):
            return str(int(value))
        if isinstance(value, str):
            return value
        raise ValueError("media_id must be serializable to str.")


@dataclass(frozen=True, slots=True)
class ResolvedMedia:
    """Media bytes ready for upload, with the kind that drives the content type."""

    data: bytes
    kind: MediaKind

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(slots=True)
class ThreadResult:
    """Outcome of posting a thread; partial when a segment failed."""

    total: int
    steps: list[PostedStep] = field(default_factory=list)
    failed_index: int | None = None
    error: "GatewayError | None" = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and len(self.steps) == self.total

    @property
    def completed(self) -> int:
        return len(self.steps)

    @property
    def thread_url(self) -> str:
        return self.steps[0].url if self.steps else ""
