"""
Factory for creating X client instances and the wired command gateway.
"""

from __future__ import annotations

import logging
from typing import Any

import tweepy

from x_gateway.clients.byte_sources import HttpByteSource
from x_gateway.clients.tweepy_client import TweepyClient
from x_gateway.config import ConfigManager, GatewaySettings, XCredentials
from x_gateway.exceptions import ConfigurationError
from x_gateway.integrations.mcp_adapter import XMCPAdapter
from x_gateway.rate_limit import RateLimiter
from x_gateway.services.media_service import MediaService
from x_gateway.services.post_service import EventHook, PostService

event_logger = logging.getLogger("x_gateway.events")


def log_post_event(name: str, payload: dict[str, Any]) -> None:
    """Default post service event hook: one DEBUG record per event."""
    event_logger.debug("%s %s", name, payload)


class XClientFactory:
    """Factory for creating properly initialized X API clients."""

    @staticmethod
    def create_from_config(config_manager: ConfigManager) -> TweepyClient:
        """
        Create TweepyClient with both v2 and v1.1 API instances.

        Raises:
            ConfigurationError: If credentials are missing or invalid
        """
        credentials = config_manager.load_credentials()
        return XClientFactory.create_from_credentials(credentials)

    @staticmethod
    def create_from_credentials(credentials: XCredentials) -> TweepyClient:
        """
        Create TweepyClient directly from credentials.

        Raises:
            ConfigurationError: If required credentials are missing
        """
        if not credentials.api_key or not credentials.api_secret:
            raise ConfigurationError("API key and secret are required")

        if not credentials.access_token or not credentials.access_token_secret:
            raise ConfigurationError("Access token and secret are required")

        # v2 client for posts and users
        v2_client = tweepy.Client(
            bearer_token=credentials.bearer_token,
            consumer_key=credentials.api_key,
            consumer_secret=credentials.api_secret,
            access_token=credentials.access_token,
            access_token_secret=credentials.access_token_secret,
        )

        # v1.1 API for media operations
        auth = tweepy.OAuth1UserHandler(
            credentials.api_key,
            credentials.api_secret,
            credentials.access_token,
            credentials.access_token_secret,
        )
        v1_api = tweepy.API(auth)

        return TweepyClient(v2_client, v1_api)


def create_adapter(
    client: TweepyClient,
    settings: GatewaySettings | None = None,
    *,
    event_hook: EventHook | None = log_post_event,
) -> XMCPAdapter:
    """Wire services around ``client`` with one rate limiter shared by all commands."""
    settings = settings or GatewaySettings()
    limiter = RateLimiter(
        threshold=settings.rate_limit_threshold,
        window_seconds=settings.rate_limit_window,
    )
    post_service = PostService(
        client,
        limiter=limiter,
        thread_pacing=settings.thread_pacing,
        event_hook=event_hook,
    )
    media_service = MediaService(
        client,
        limiter=limiter,
        http=HttpByteSource(timeout=settings.download_timeout),
    )
    return XMCPAdapter(post_service=post_service, media_service=media_service)


def create_gateway(config_manager: ConfigManager | None = None) -> XMCPAdapter:
    """Load credentials and settings, then build the gateway façade."""
    config_manager = config_manager or ConfigManager()
    settings = config_manager.load_settings()
    client = XClientFactory.create_from_config(config_manager)
    return create_adapter(client, settings)
