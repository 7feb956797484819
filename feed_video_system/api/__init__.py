"""
API server module for the Feed Video System.

This module provides REST endpoints for inspecting and driving playback,
preloading and cart locks.
"""

from .server import APIServer

__all__ = ["APIServer"]
