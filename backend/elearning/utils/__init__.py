"""
Utility helpers for the Visnet E-Learning API.
"""

from .formatting import slugify, format_relative_time, format_audit_timestamp, blank_to_none

__all__ = [
    "slugify",
    "format_relative_time",
    "format_audit_timestamp",
    "blank_to_none"
]
