"""Configuration module for ledgerbook."""

from ledgerbook.config.logging import bind_report_context, configure_logging
from ledgerbook.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "configure_logging", "bind_report_context"]
