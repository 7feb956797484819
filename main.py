#!/usr/bin/env python3
"""
Main entry point for the Feed Video System.

This script starts the playback coordinator, the cart lock timer and the
debug API server.
"""

import sys
import os

# Add the current directory to Python path to import our modules
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from feed_video_system.main import main

if __name__ == "__main__":
    main()
