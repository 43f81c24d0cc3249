"""
Service layer modules orchestrate domain workflows (posts, threads, media,
users) on top of the lower-level client adapters.
"""

__all__ = [
    "post_service",
    "media_service",
]
