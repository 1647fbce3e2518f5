"""
Utility helper functions
"""
import hashlib
import re
from datetime import datetime


def sanitize_filename(name: str) -> str:
    """
    Sanitize a string to be used as a filename.

    Args:
        name: Original name

    Returns:
        Sanitized filename
    """
    # Remove invalid characters
    sanitized = re.sub(r'[<>:"/\\|?*]', '', name)
    # Replace spaces with underscores
    sanitized = sanitized.replace(' ', '_')
    # Limit length
    return sanitized[:100]


def format_duration(ms: int) -> str:
    """
    Format duration in milliseconds to human-readable string.

    Args:
        ms: Duration in milliseconds

    Returns:
        Formatted duration string
    """
    if ms < 1000:
        return f"{ms}ms"
    elif ms < 60000:
        return f"{ms / 1000:.1f}s"
    else:
        minutes = ms // 60000
        seconds = (ms % 60000) / 1000
        return f"{minutes}m {seconds:.0f}s"


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add when truncated

    Returns:
        Truncated text
    """
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def normalize_title(title: str) -> str:
    """
    Normalize a defect title for deduplication.

    Case, punctuation, whitespace and concrete numbers (viewport widths,
    timings) are ignored, so "Horizontal overflow at 375px" and
    "horizontal overflow at 320px" collapse to the same key.
    """
    lowered = (title or "").lower()
    lowered = re.sub(r"\d+(\.\d+)?", "#", lowered)
    lowered = re.sub(r"[^a-z#]+", " ", lowered)
    return lowered.strip()


def stable_id(*parts: str, prefix: str = "BUG") -> str:
    """Deterministic short id derived from its parts."""
    digest = hashlib.sha1("|".join(parts).encode("utf-8")).hexdigest()
    return f"{prefix}-{digest[:8].upper()}"


def timestamp_now() -> str:
    """Get current timestamp as ISO format string."""
    return datetime.now().isoformat()
