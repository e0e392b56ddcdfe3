"""
Logging utility for the deployment workflow.

This module provides consistent logging setup and message formatting
across the configuration, template and orchestration modules.
"""

import logging
import sys
from typing import Optional


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with consistent formatting.
    
    Args:
        name: Logger name (typically __name__ from calling module)
        
    Returns:
        Logger instance
        
    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Template loaded")
    """
    return logging.getLogger(name)


def setup_logging(level: str = "INFO", format_string: Optional[str] = None) -> None:
    """
    Set up logging configuration for the application.
    
    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        format_string: Custom format string for log messages
        
    Raises:
        ValueError: If the level name is unknown
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    
    logging.basicConfig(
        level=numeric_level,
        format=format_string,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )
    
    # The Azure SDK logs every HTTP round-trip at INFO
    logging.getLogger("azure.identity").setLevel(logging.WARNING)
    logging.getLogger("azure.core").setLevel(logging.WARNING)
    logging.getLogger("azure.mgmt").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def log_operation(logger: logging.Logger, operation: str, details: str) -> None:
    """
    Log workflow operations with consistent formatting.
    
    Args:
        logger: Logger instance
        operation: Operation being performed (e.g., "AUTHENTICATE", "DEPLOY")
        details: Details about the operation
        
    Example:
        >>> logger = get_logger(__name__)
        >>> log_operation(logger, "CREATE_GROUP", "name=testrg4811, location=westus")
    """
    logger.info(f"[{operation}] {details}")


def log_error(logger: logging.Logger, operation: str, error: Exception, context: str = "") -> None:
    """
    Log workflow errors with consistent formatting.
    
    Args:
        logger: Logger instance
        operation: Operation that failed
        error: Exception that occurred
        context: Additional context about the error
    """
    context_str = f" ({context})" if context else ""
    logger.error(f"[{operation}] FAILED{context_str}: {str(error)}")
