"""Utility package for the course platform client.

Exposed functions:
    retry_network_errors: Tenacity-backed retry for idempotent requests.
"""

from .retry import retry_network_errors

__all__ = ["retry_network_errors"]
