"""
Utility functions module.

Provides helper functions for settings and artifact loading,
including deep merge, YAML loading and logging utilities.
"""

from .helpers import deep_merge, safe_load_yaml, validate_file_exists, expand_path
from .logger import get_logger, setup_logging, log_operation, log_error

__all__ = [
    "deep_merge",
    "safe_load_yaml",
    "validate_file_exists",
    "expand_path",
    "get_logger",
    "setup_logging",
    "log_operation",
    "log_error"
]
