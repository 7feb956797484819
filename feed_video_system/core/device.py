"""
Device platform detection.

The platform class only decides which capacity constants apply: iOS-class
devices allow fewer simultaneous video decoders than everything else.
"""

import os
import logging
import platform
from enum import Enum
from typing import Optional

PLATFORM_ENV_VAR = "FEED_PLATFORM"

logger = logging.getLogger(__name__)


class DevicePlatform(Enum):
    """Platform classes with distinct decoder limits"""
    IOS = "ios"
    ANDROID = "android"
    WEB = "web"
    OTHER = "other"

    @property
    def is_ios(self) -> bool:
        return self is DevicePlatform.IOS


_SYSTEM_NAMES = {
    "ios": DevicePlatform.IOS,
    "ipados": DevicePlatform.IOS,
    "android": DevicePlatform.ANDROID,
    "emscripten": DevicePlatform.WEB,
    "wasi": DevicePlatform.WEB,
}


def parse_platform(value: str) -> DevicePlatform:
    """Parse a platform name, raising ValueError for unknown names"""
    try:
        return DevicePlatform(value.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown platform: {value!r}") from None


def detect_platform(configured: Optional[str] = "auto") -> DevicePlatform:
    """
    Resolve the running platform class.

    Order of precedence: the FEED_PLATFORM environment variable, then the
    configured value, then the host operating system.
    """
    override = os.environ.get(PLATFORM_ENV_VAR)
    if override:
        try:
            return parse_platform(override)
        except ValueError:
            logger.warning(f"Ignoring invalid {PLATFORM_ENV_VAR}={override!r}")

    if configured and configured.lower() != "auto":
        try:
            return parse_platform(configured)
        except ValueError:
            logger.warning(f"Ignoring invalid configured platform {configured!r}")

    system_name = platform.system().lower()
    return _SYSTEM_NAMES.get(system_name, DevicePlatform.OTHER)


def capacity_for(device_platform: DevicePlatform, ios_value: int, default_value: int) -> int:
    """Pick the iOS or the default capacity constant"""
    return ios_value if device_platform.is_ios else default_value
