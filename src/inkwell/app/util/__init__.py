"""Utility helpers shared across the application."""

from .dates import SimpleDate, days_in_month, offset_month
from .tags import canonicalize, canonicalize_all

__all__ = [
    "SimpleDate",
    "days_in_month",
    "offset_month",
    "canonicalize",
    "canonicalize_all",
]
