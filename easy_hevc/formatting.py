"""Human-readable formatting helpers."""


def format_size(size: float) -> str:
    """Format file size in human-readable form."""
    sign = "-" if size < 0 else ""
    size = abs(size)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024:
            return f"{sign}{size:.1f} {unit}"
        size /= 1024
    return f"{sign}{size:.1f} TB"


def format_duration(seconds: float) -> str:
    """Format an elapsed time as e.g. '1h 2m 3s'."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_percent(part: float, whole: float) -> str:
    """Format part/whole as a percentage with one decimal."""
    if not whole:
        return "0.0%"
    return f"{part / whole * 100:.1f}%"
