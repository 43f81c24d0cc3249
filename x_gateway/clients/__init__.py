"""
Client adapters for the X API and for media byte retrieval.
"""

__all__ = [
    "tweepy_client",
    "byte_sources",
]
