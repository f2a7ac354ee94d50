"""Core configuration and utilities for SmartReports."""

from smartreports.core.config import settings
from smartreports.core.logging import setup_logging

__all__ = ["settings", "setup_logging"]
