"""Structured logging package."""

from src.log.logger import create_correlation_id, get_logger

__all__ = ["create_correlation_id", "get_logger"]
