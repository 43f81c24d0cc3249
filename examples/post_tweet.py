#!/usr/bin/env python
"""
Example: Post a tweet or a thread through the command gateway.

This example demonstrates:
- Building the gateway from environment, .env or credential file
- Uploading media from a path or URL
- Posting a single tweet or a thread with the same commands an MCP client sends

Usage:
    # Text-only tweet
    python examples/post_tweet.py "Hello from x_gateway!"

    # Tweet with image
    python examples/post_tweet.py "Check out this image!" --media path/to/image.png

    # Thread (each positional argument is one segment)
    python examples/post_tweet.py "First part" "Second part" "Third part"

Requirements:
    Set environment variables, a .env file, or create credentials/x_config.json:
    - X_API_KEY
    - X_API_SECRET
    - X_ACCESS_TOKEN
    - X_ACCESS_TOKEN_SECRET
    - X_BEARER_TOKEN (optional)
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from x_gateway.config import ConfigManager
from x_gateway.exceptions import ConfigurationError, GatewayError, ValidationError
from x_gateway.factory import create_gateway
from x_gateway.formatting import render_error
from x_gateway.integrations.mcp_adapter import XMCPAdapter
from x_gateway.logging_config import configure_logging
from x_gateway.validation import validate_command


async def run(adapter: XMCPAdapter, texts: list[str], media: str | None) -> int:
    if media:
        key = "file_url" if media.startswith(("http://", "https://")) else "file_path"
        request = validate_command("upload_media", {key: media})
        try:
            upload = await adapter.media_service.upload(request.to_source())
        except GatewayError as e:
            print(f"Media upload failed: {render_error(e)}")
            return 1
        print(f"Uploaded {upload.kind} ({upload.size} bytes), media_id={upload.media_id}")
        result = await adapter.execute("post_tweet", {"text": texts[0], "media_ids": [upload.media_id]})
    elif len(texts) > 1:
        result = await adapter.execute("create_thread", {"tweets": texts})
    else:
        result = await adapter.execute("post_tweet", {"text": texts[0]})

    print(result.text)
    return 1 if result.is_error else 0


def main() -> int:
    """Main entry point for the example."""
    parser = argparse.ArgumentParser(description="Post a tweet or thread via x_gateway")
    parser.add_argument("texts", nargs="+", help="Tweet text; several values post a thread")
    parser.add_argument("--media", help="Media path or http(s) URL to attach to a single tweet")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to credentials JSON file (default: credentials/x_config.json)",
    )
    args = parser.parse_args()

    if args.media and len(args.texts) > 1:
        print("Error: media can only be attached to a single tweet")
        return 1

    configure_logging("INFO")
    try:
        adapter = create_gateway(ConfigManager(credential_path=args.config))
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        print("\nPlease set X_API_KEY, X_API_SECRET, X_ACCESS_TOKEN and X_ACCESS_TOKEN_SECRET.")
        return 1

    try:
        return asyncio.run(run(adapter, args.texts, args.media))
    except ValidationError as e:
        print(f"Invalid input: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
