"""
Configuration management for the Feed Video System.

This module handles all configuration settings including playback slot limits,
preload cache sizing, cart lock timing, and system parameters.
"""

import json
import logging
from typing import Dict, Optional, Any
from dataclasses import dataclass, asdict, replace
from pathlib import Path


@dataclass
class PlaybackConfig:
    """Concurrent video playback configuration"""

    platform: str = "auto"  # "auto", "ios", "android", "web", "other"
    max_simultaneous_ios: int = 2  # iOS constrains simultaneous decoders
    max_simultaneous_default: int = 4

    def __post_init__(self):
        if self.max_simultaneous_ios < 1 or self.max_simultaneous_default < 1:
            raise ValueError("Simultaneous video limits must be at least 1")


@dataclass
class PreloadConfig:
    """Preload cache configuration"""

    max_preloaded_ios: int = 3
    max_preloaded_default: int = 5
    inter_task_delay_ms: int = 100  # Pause between preload calls

    def __post_init__(self):
        if self.max_preloaded_ios < 1 or self.max_preloaded_default < 1:
            raise ValueError("Preload capacities must be at least 1")
        if self.inter_task_delay_ms < 0:
            raise ValueError("Preload delay cannot be negative")


@dataclass
class CartLockConfig:
    """Locked product countdown configuration"""

    default_duration_seconds: int = 15 * 60  # Products stay reserved for 15 minutes
    update_interval_seconds: float = 1.0
    expiring_threshold_seconds: int = 2 * 60

    def __post_init__(self):
        if self.default_duration_seconds <= 0:
            raise ValueError("Lock duration must be positive")
        if self.update_interval_seconds <= 0:
            raise ValueError("Lock update interval must be positive")


@dataclass
class SystemConfig:
    """System-wide configuration"""

    log_level: str = "INFO"
    log_file: Optional[str] = "feed_video_system.log"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    enable_api: bool = True
    timezone: str = "UTC"


class Config:
    """Main configuration manager"""

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or "config.json"
        self.logger = logging.getLogger(__name__)

        # Default configurations
        self.playback = PlaybackConfig()
        self.preload = PreloadConfig()
        self.cart_lock = CartLockConfig()
        self.system = SystemConfig()

        self.load_config()

    def load_config(self) -> None:
        """Load configuration from file"""
        config_path = Path(self.config_file)

        if not config_path.exists():
            self.logger.info(f"Config file {config_path} not found, using defaults")
            self.save_config()
            return

        try:
            with open(config_path, "r") as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Error loading config from {config_path}: {e}")
            return

        self.playback = self._load_section(config_data, "playback", PlaybackConfig)
        self.preload = self._load_section(config_data, "preload", PreloadConfig)
        self.cart_lock = self._load_section(config_data, "cart_lock", CartLockConfig)
        self.system = self._load_section(config_data, "system", SystemConfig)

        self.logger.info(f"Configuration loaded from {config_path}")

    def _load_section(self, config_data: Dict[str, Any], key: str, section_cls):
        """Build one config section, falling back to defaults when it is invalid"""
        if key not in config_data:
            return section_cls()

        try:
            return section_cls(**config_data[key])
        except (TypeError, ValueError) as e:
            self.logger.error(f"Invalid '{key}' configuration, using defaults: {e}")
            return section_cls()

    def save_config(self) -> None:
        """Save current configuration to file"""
        try:
            with open(self.config_file, "w") as f:
                json.dump(self.to_dict(), f, indent=2)
            self.logger.info(f"Configuration saved to {self.config_file}")
        except OSError as e:
            self.logger.error(f"Error saving config to {self.config_file}: {e}")

    def update_section(self, section: str, **kwargs) -> bool:
        """Update fields of a configuration section.

        The section is rebuilt so its validation runs; a rejected update leaves
        both the in-memory section and the file unchanged.
        """
        target = getattr(self, section, None)
        if target is None or not hasattr(target, "__dataclass_fields__"):
            return False

        try:
            updated = replace(target, **kwargs)
        except (TypeError, ValueError) as e:
            self.logger.error(f"Rejected '{section}' update {kwargs}: {e}")
            return False

        setattr(self, section, updated)
        self.save_config()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {"playback": asdict(self.playback), "preload": asdict(self.preload), "cart_lock": asdict(self.cart_lock), "system": asdict(self.system)}
