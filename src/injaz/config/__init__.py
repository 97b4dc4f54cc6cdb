"""Configuration module for Injaz."""

from injaz.config.logging import bind_request_context, configure_logging
from injaz.config.settings import FlatSettings, get_settings

__all__ = ["FlatSettings", "get_settings", "configure_logging", "bind_request_context"]
