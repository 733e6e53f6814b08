from .build_app import build_match_store

__all__ = [
    "build_match_store",
]
"""Factory helpers for building the wired match store."""
