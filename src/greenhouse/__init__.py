"""Greenhouse plant marketplace API.

Lists plants, takes single-item Stripe checkout payments and records the
resulting orders. Callers authenticate with Firebase ID tokens.
"""

__version__ = "0.1.0"
