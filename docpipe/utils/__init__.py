"""Shared utilities: the error hierarchy and structured logging setup."""

from docpipe.utils.errors import DocPipeError
from docpipe.utils.logging import configure_logging, get_logger

__all__ = ["DocPipeError", "configure_logging", "get_logger"]
