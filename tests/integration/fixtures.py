"""Mock responses for X API integration tests."""

from __future__ import annotations

import re

CREATE_TWEET_URL = re.compile(r"https://api\.(?:twitter|x)\.com/2/tweets$")
DELETE_TWEET_URL = re.compile(r"https://api\.(?:twitter|x)\.com/2/tweets/\d+$")
USER_BY_USERNAME_URL = re.compile(r"https://api\.(?:twitter|x)\.com/2/users/by/username/\w+")
SEARCH_URL = re.compile(r"https://api\.(?:twitter|x)\.com/2/tweets/search/recent")

TEST_CREDENTIALS = {
    "api_key": "test_api_key",
    "api_secret": "test_api_secret",
    "access_token": "test_access_token",
    "access_token_secret": "test_access_token_secret",
}


def tweet_response(tweet_id: str, text: str) -> dict:
    return {
        "data": {
            "id": tweet_id,
            "text": text,
            "edit_history_tweet_ids": [tweet_id],
        }
    }


DELETE_TWEET_RESPONSE = {
    "data": {
        "deleted": True,
    }
}

USER_RESPONSE = {
    "data": {
        "id": "2244994945",
        "name": "Developers",
        "username": "XDevelopers",
        "verified": True,
        "public_metrics": {
            "followers_count": 583423,
            "following_count": 2048,
            "tweet_count": 14052,
            "listed_count": 1672,
        },
    }
}

SEARCH_TWEETS_RESPONSE = {
    "data": [
        {
            "id": "1111111111",
            "text": "First result",
            "author_id": "123456",
            "public_metrics": {"retweet_count": 1, "reply_count": 2, "like_count": 3, "quote_count": 4},
        },
        {
            "id": "2222222222",
            "text": "Second result",
            "author_id": "789012",
        },
    ],
    "includes": {
        "users": [
            {"id": "123456", "name": "First", "username": "first_user"},
            {"id": "789012", "name": "Second", "username": "second_user"},
        ]
    },
    "meta": {
        "result_count": 2,
    },
}

FORBIDDEN_RESPONSE = {
    "detail": "You are not allowed to create a Tweet with duplicate content.",
    "type": "about:blank",
    "title": "Forbidden",
    "status": 403,
}

TOO_MANY_REQUESTS_RESPONSE = {
    "title": "Too Many Requests",
    "detail": "Too Many Requests",
    "type": "about:blank",
    "status": 429,
}
