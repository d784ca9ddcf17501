"""HTTP middleware and error handlers."""

from .errors import register_error_handlers

__all__ = ["register_error_handlers"]
