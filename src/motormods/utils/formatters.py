"""Formatting utilities for display values."""

_SIZE_UNITS = ("KB", "MB", "GB", "TB")


def format_file_size(num_bytes: int) -> str:
    """Format a byte count for humans (``"512 B"``, ``"1.5 MB"``)."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    size = float(num_bytes)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        size /= 1024
        if size < 1024:
            break
    return f"{size:.1f} {unit}"
