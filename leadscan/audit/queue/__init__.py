"""Request pacing package for page audits."""

from .rate_limiter import RequestPacer, DEFAULT_REQUEST_INTERVAL

__all__ = [
    'RequestPacer',
    'DEFAULT_REQUEST_INTERVAL',
]
