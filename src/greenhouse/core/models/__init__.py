"""Core models."""

from .identity import IdentityClaims

__all__ = ["IdentityClaims"]
