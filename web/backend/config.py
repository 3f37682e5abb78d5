#!/usr/bin/env python3
"""
Configuration access for the web application.
"""

import os
from pathlib import Path
from functools import lru_cache

from core.config_loader import AppConfig, load_config


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


@lru_cache()
def get_config() -> AppConfig:
    """
    Get application configuration with caching.

    Loads PICKSCORE_CONFIG (default: config.yaml at the project root) and
    applies environment variable overrides, including WEB_HOST / WEB_PORT.
    """
    config_path = os.environ.get("PICKSCORE_CONFIG", str(get_project_root() / "config.yaml"))
    config = load_config(config_path)

    if 'WEB_HOST' in os.environ:
        config.web.host = os.environ['WEB_HOST']
    if 'WEB_PORT' in os.environ:
        config.web.port = int(os.environ['WEB_PORT'])

    return config
