"""Configuration module for the GIGO sales engine."""

from gigo_sales.config.logging import configure_logging, get_logger
from gigo_sales.config.settings import FlatSettings, get_settings

__all__ = ["FlatSettings", "get_settings", "configure_logging", "get_logger"]
