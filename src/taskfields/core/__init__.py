"""Core configuration and utilities for taskfields."""

from taskfields.core.config import settings
from taskfields.core.logging import setup_logging

__all__ = ["settings", "setup_logging"]
