"""
Main Application Coordinator for the Feed Video System.

This module wires the playback module, the cart lock timer and the API server
together and provides graceful startup/shutdown.
"""

import signal
import time
import logging
import sys
from typing import Optional
from datetime import datetime

from .core.config import Config
from .core.events import Event, EventSystem, EventType
from .core.logging_config import setup_logging, get_error_tracker, get_performance_logger
from .playback.integration import PlaybackModule
from .cart.lock_timer import LockExpiryTimer
from .api.server import APIServer


class FeedVideoSystem:
    """Main application coordinator for the Feed Video System"""

    def __init__(self, config_file: Optional[str] = None, install_signal_handlers: bool = True, log_level: Optional[str] = None):
        self.config = Config(config_file)
        if log_level:
            # Command-line override, not persisted
            self.config.system.log_level = log_level

        self.logger_setup = setup_logging(log_level=self.config.system.log_level, log_file=self.config.system.log_file)
        self.logger = logging.getLogger(__name__)

        self.error_tracker = get_error_tracker("main_system")
        self.performance_logger = get_performance_logger("main_system")

        self.event_system = EventSystem()

        self.playback_module = PlaybackModule(self.config, self.event_system)
        self.lock_timer = LockExpiryTimer(self.config.cart_lock, self.event_system)
        self.api_server = APIServer(self.config, self.event_system, self.playback_module, self.lock_timer)

        self.event_system.subscribe(EventType.VIDEO_EVICTED, self._on_video_evicted)
        self.event_system.subscribe(EventType.VIDEO_START_FAILED, self._on_video_start_failed)
        self.event_system.subscribe(EventType.LOCK_EXPIRED, self._on_lock_expired)

        self.running = False
        self.start_time: Optional[datetime] = None
        self.expired_lock_count = 0

        if install_signal_handlers:
            self._setup_signal_handlers()

        self.logger.info("Feed Video System initialized")

    def _on_video_evicted(self, event: Event) -> None:
        self.logger.info(f"Evicted video {event.data.get('video_id')} to make room for {event.data.get('replaced_by')}")

    def _on_video_start_failed(self, event: Event) -> None:
        self.error_tracker.log_warning(f"Video {event.data.get('video_id')} did not start: {event.data.get('error')}", "playback")

    def _on_lock_expired(self, event: Event) -> None:
        """Expired locks leave the cart silently; keep a record of them"""
        self.expired_lock_count += 1
        self.logger.info(f"Cart lock {event.data.get('lock_id')} expired (product {event.data.get('product_id')})")

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown"""

        def signal_handler(signum, frame):
            self.logger.info(f"Received signal {signum}, initiating graceful shutdown...")
            self.stop()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def start(self) -> bool:
        """Start the system"""
        if self.running:
            self.logger.warning("System is already running")
            return True

        self.logger.info("Starting Feed Video System...")
        self.performance_logger.start_timer("system_startup")
        self.start_time = datetime.now()

        try:
            if not self.api_server.start():
                self.error_tracker.log_warning("API server not started", "api_startup")
                return False

            self.running = True
            self.event_system.publish(EventType.SYSTEM_STARTED, "main_system", {"timestamp": self.start_time.isoformat()})

            startup_time = self.performance_logger.end_timer("system_startup")
            self.logger.info(f"Feed Video System started successfully in {startup_time:.2f}s")
            return True

        except Exception as e:
            self.error_tracker.log_error(e, "system_startup")
            self.stop()
            return False

    def stop(self) -> None:
        """Stop the system gracefully"""
        if not self.running:
            return

        self.logger.info("Stopping Feed Video System...")
        self.running = False

        try:
            self.event_system.publish(EventType.SYSTEM_SHUTDOWN, "main_system", {"timestamp": datetime.now().isoformat()})

            # The server's lifespan hook stops the lock timer and playback
            self.api_server.stop()

            if self.start_time:
                uptime = (datetime.now() - self.start_time).total_seconds()
                self.logger.info(f"System uptime: {uptime:.1f} seconds")

            self.logger.info("Feed Video System stopped")

        except Exception as e:
            self.error_tracker.log_error(e, "system_shutdown")

    def run(self) -> None:
        """Run the system (blocking call)"""
        if not self.start():
            self.logger.error("Failed to start system")
            return

        try:
            self.logger.info("System running... Press Ctrl+C to stop")
            while self.running and self.api_server.is_running():
                time.sleep(1)

        except KeyboardInterrupt:
            self.logger.info("Keyboard interrupt received")
        finally:
            self.stop()

    def get_system_status(self) -> dict:
        """Get comprehensive system status"""
        return {
            "running": self.running,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "uptime_seconds": (datetime.now() - self.start_time).total_seconds() if self.start_time else 0,
            "components": {"api_server": {"running": self.api_server.is_running()}, "lock_timer": {"running": self.lock_timer.is_running, "locks": self.lock_timer.count, "expired": self.expired_lock_count}},
            "playback": self.playback_module.get_module_status(),
        }

    def is_running(self) -> bool:
        return self.running


def main():
    """Main entry point for the application"""
    import argparse

    parser = argparse.ArgumentParser(description="Feed Video System")
    parser.add_argument("--config", type=str, help="Path to configuration file", default="config.json")
    parser.add_argument("--log-level", type=str, choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Override log level", default=None)

    args = parser.parse_args()

    system = FeedVideoSystem(args.config, log_level=args.log_level)

    try:
        system.run()
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
