"""
Utilities Module
================

Helper functions and utility classes.
"""

from app.utils.helpers import ensure_utc, format_datetime, generate_uuid, parse_datetime, utc_now

__all__ = ["ensure_utc", "format_datetime", "generate_uuid", "parse_datetime", "utc_now"]
