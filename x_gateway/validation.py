"""
Command registry and payload validation.

Each command declares a request model for its field constraints and a list of
cross-field rules. ``validate_command`` checks both and reports every
violation in one ``ValidationError``. Validation is pure: it never touches the
network or the rate limiter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

import pydantic
from pydantic import BaseModel

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

Rule = Callable[[Mapping[str, Any]], "str | None"]


def _present(payload: Mapping[str, Any], name: str) -> bool:
    return payload.get(name) not in (None, "")


def mutually_exclusive(*names: str) -> Rule:
    """At most one of ``names`` may be present."""

    def rule(payload: Mapping[str, Any]) -> str | None:
        given = [name for name in names if _present(payload, name)]
        if len(given) > 1:
            return f"{' and '.join(given)} cannot be used together"
        return None

    return rule


def exactly_one_of(*names: str) -> Rule:
    """Exactly one of ``names`` must be present."""

    def rule(payload: Mapping[str, Any]) -> str | None:
        given = [name for name in names if _present(payload, name)]
        if len(given) == 1:
            return None
        joined = ", ".join(names)
        if not given:
            return f"exactly one of {joined} must be provided"
        return f"only one of {joined} may be provided (got {', '.join(given)})"

    return rule


@dataclass(frozen=True, slots=True)
class CommandSpec:
    name: str
    description: str
    model: type[BaseModel]
    rules: tuple[Rule, ...] = field(default_factory=tuple)

    def input_schema(self) -> dict[str, Any]:
        schema = self.model.model_json_schema()
        schema.setdefault("required", [])
        return schema


COMMANDS: dict[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        CommandSpec(
            "post_tweet",
            "Post a new tweet to Twitter. Supports text, media, polls, replies, and quote tweets.",
            PostTweetRequest,
            (mutually_exclusive("media_ids", "poll"),),
        ),
        CommandSpec(
            "upload_media",
            "Upload media (image, video, or GIF) to Twitter. Returns media_id for use in post_tweet.",
            UploadMediaRequest,
            (exactly_one_of("file_path", "file_url", "file_base64"),),
        ),
        CommandSpec(
            "create_thread",
            "Create a Twitter thread by posting multiple connected tweets",
            CreateThreadRequest,
        ),
        CommandSpec("delete_tweet", "Delete a tweet by its ID", TweetIdRequest),
        CommandSpec("retweet", "Retweet a tweet", TweetIdRequest),
        CommandSpec("unretweet", "Unretweet a tweet", TweetIdRequest),
        CommandSpec(
            "get_user",
            "Get user information by username or user ID",
            GetUserRequest,
            (exactly_one_of("username", "user_id"),),
        ),
        CommandSpec("get_user_timeline", "Get a user's timeline (their tweets)", UserTimelineRequest),
        CommandSpec("search_tweets", "Search for tweets on Twitter", SearchTweetsRequest),
    )
}


def get_command(name: str) -> CommandSpec:
    try:
        return COMMANDS[name]
    except KeyError:
        raise UnknownCommand(name) from None


def validate_command(name: str, payload: Mapping[str, Any] | None) -> BaseModel:
    """
    Validate ``payload`` for command ``name``.

    Returns:
        The frozen request model for the command.

    Raises:
        UnknownCommand: when ``name`` is not registered.
        ValidationError: listing every field and cross-field violation.
    """
    spec = get_command(name)
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValidationError(name, [f"arguments must be an object, got {type(payload).__name__}"])

    violations: list[str] = []
    model: BaseModel | None = None
    try:
        model = spec.model.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        violations.extend(_describe(error) for error in exc.errors())

    for rule in spec.rules:
        message = rule(payload)
        if message:
            violations.append(message)

    if violations or model is None:
        raise ValidationError(name, violations)
    return model


def _describe(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "payload"
    return f"{location}: {error.get('msg', 'invalid value')}"
