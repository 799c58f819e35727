"""
HTTP Client Module

Provider-agnostic HTTP client for off-platform services.
"""

from .client import HttpClient, HttpError, HttpResponse

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
]
