"""Utilities package"""
from .helpers import (
    format_duration,
    normalize_title,
    sanitize_filename,
    stable_id,
    timestamp_now,
    truncate_text,
)

__all__ = [
    "format_duration",
    "normalize_title",
    "sanitize_filename",
    "stable_id",
    "timestamp_now",
    "truncate_text",
]
