"""
Key providers for resolving JWT signing keys.

This package contains implementations of the JwksSource protocol.
"""

from .remote import RemoteJWKSFetcher

__all__ = ["RemoteJWKSFetcher"]
