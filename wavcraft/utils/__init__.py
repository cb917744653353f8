"""
Utility modules for configuration, logging, and error handling.
"""

from wavcraft.utils.errors import (
    WavCraftError,
    FileReadError,
    UnsupportedFormatError,
    FileTooLargeError,
    WriteError,
    EmptyInputError,
    InvalidBufferError,
    ConfigurationError,
)
from wavcraft.utils.logging import (
    JSONFormatter,
    configure_from_section,
    get_logger,
    setup_logging,
)
from wavcraft.utils.config import ConfigManager, load_config

__all__ = [
    "WavCraftError",
    "FileReadError",
    "UnsupportedFormatError",
    "FileTooLargeError",
    "WriteError",
    "EmptyInputError",
    "InvalidBufferError",
    "ConfigurationError",
    "get_logger",
    "setup_logging",
    "configure_from_section",
    "JSONFormatter",
    "ConfigManager",
    "load_config",
]
