"""
Feed Video System - Core Module

This module contains configuration management, logging, event handling and
platform detection shared by the playback and cart components.
"""

from .config import Config
from .events import EventSystem, EventType, Event
from .device import DevicePlatform, detect_platform

__all__ = ["Config", "EventSystem", "EventType", "Event", "DevicePlatform", "detect_platform"]
