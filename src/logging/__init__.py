"""
Project logging.

Usage:
    from src.logging import get_logger

    logger = get_logger("ProgressionEngine")
    logger.success("Problem completed")
"""

from .logger import SUCCESS, Logger, get_logger

__all__ = ["SUCCESS", "Logger", "get_logger"]
