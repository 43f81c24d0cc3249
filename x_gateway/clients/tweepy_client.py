"""
Thin wrapper around tweepy.Client (v2) and tweepy.API (v1.1 media).

The wrapper only shapes payloads; failures propagate untouched so the error
normalizer sees every upstream field.
"""

from __future__ import annotations

import io
from typing import Any, Sequence

import tweepy

from x_gateway.models import MediaKind

USER_FIELDS = ["username", "name", "verified", "public_metrics"]
POST_FIELDS = ["public_metrics", "created_at", "author_id"]

MEDIA_UPLOAD_PROFILE: dict[str, tuple[str, str]] = {
    # kind: (filename tweepy derives the MIME type from, media category)
    "image": ("upload.jpg", "tweet_image"),
    "gif": ("upload.gif", "tweet_gif"),
    "video": ("upload.mp4", "tweet_video"),
}


class TweepyClient:
    """Dual-client adapter: v2 for posts and users, v1.1 for media."""

    def __init__(self, client: tweepy.Client, api: tweepy.API | None = None) -> None:
        self._client = client
        self._api = api

    # -- posts -------------------------------------------------------------

    def create_post(
        self,
        *,
        text: str,
        in_reply_to: str | None = None,
        quote_post_id: str | None = None,
        media_ids: Sequence[str] | None = None,
        poll_options: Sequence[str] | None = None,
        poll_duration_minutes: int | None = None,
    ) -> Any:
        payload: dict[str, Any] = {"text": text, "user_auth": True}
        if in_reply_to:
            payload["in_reply_to_tweet_id"] = in_reply_to
        if quote_post_id:
            payload["quote_tweet_id"] = quote_post_id
        if media_ids:
            payload["media_ids"] = list(media_ids)
        if poll_options:
            payload["poll_options"] = list(poll_options)
            payload["poll_duration_minutes"] = poll_duration_minutes
        return self._invoke("create_tweet", **payload)

    def delete_post(self, post_id: str) -> Any:
        return self._invoke("delete_tweet", post_id, user_auth=True)

    def repost(self, post_id: str) -> Any:
        return self._invoke("retweet", post_id, user_auth=True)

    def undo_repost(self, post_id: str) -> Any:
        return self._invoke("unretweet", post_id, user_auth=True)

    def search_recent_posts(self, query: str, *, max_results: int) -> Any:
        return self._invoke(
            "search_recent_tweets",
            query,
            max_results=max_results,
            expansions=["author_id"],
            tweet_fields=POST_FIELDS,
            user_fields=USER_FIELDS,
            user_auth=True,
        )

    # -- users -------------------------------------------------------------

    def get_user(self, *, user_id: str | None = None, username: str | None = None) -> Any:
        return self._invoke(
            "get_user",
            id=user_id,
            username=username,
            user_fields=USER_FIELDS,
            user_auth=True,
        )

    def get_user_posts(self, user_id: str, *, max_results: int) -> Any:
        return self._invoke(
            "get_users_tweets",
            user_id,
            max_results=max_results,
            expansions=["author_id"],
            tweet_fields=POST_FIELDS,
            user_fields=USER_FIELDS,
            user_auth=True,
        )

    # -- media -------------------------------------------------------------

    def upload_media(self, *, data: bytes, kind: MediaKind) -> Any:
        filename, media_category = MEDIA_UPLOAD_PROFILE.get(kind, MEDIA_UPLOAD_PROFILE["image"])
        file_obj = io.BytesIO(data)
        return self._invoke_api(
            "media_upload",
            filename=filename,
            file=file_obj,
            media_category=media_category,
            chunked=kind != "image",
        )

    def create_media_metadata(self, media_id: str, alt_text: str) -> Any:
        return self._invoke_api("create_media_metadata", media_id, alt_text)

    def _invoke(self, method_name: str, *args: Any, **kwargs: Any) -> Any:
        method = getattr(self._client, method_name, None)
        if method is None:
            raise AttributeError(f"tweepy.Client has no attribute '{method_name}'.")
        return method(*args, **kwargs)

    def _invoke_api(self, method_name: str, *args: Any, **kwargs: Any) -> Any:
        if self._api is None:
            raise AttributeError("Media operations require a tweepy.API (v1.1) instance.")
        method = getattr(self._api, method_name, None)
        if method is None:
            raise AttributeError(f"tweepy.API has no attribute '{method_name}'.")
        return method(*args, **kwargs)
