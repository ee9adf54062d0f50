"""
Middleware package for the Rental Marketplace API.
"""

from .request_logging import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware"
]
