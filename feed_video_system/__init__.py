"""
Feed Video System

Playback coordination for a vertical video feed: caps simultaneously playing
videos, tracks preloaded URLs, and expires locked cart products.
"""

__version__ = "1.0.0"

from .main import FeedVideoSystem

__all__ = ["FeedVideoSystem"]
