"""Injaz - business management backend with a Gemini-powered assistant."""

__version__ = "0.1.0"

from injaz.config import configure_logging, get_settings

__all__ = [
    "__version__",
    "configure_logging",
    "get_settings",
]
