"""Video file discovery."""

import os
from pathlib import Path


VIDEO_EXTENSIONS = frozenset({
    ".mp4",
    ".mkv",
    ".avi",
    ".mov",
    ".flv",
    ".wmv",
    ".webm",
    ".m4v",
    ".mpg",
    ".mpeg",
    ".ts",
})


class ScanError:
    """Record of a path that could not be scanned."""

    def __init__(self, path: str, error: str):
        self.path = path
        self.error = error

    def __repr__(self) -> str:
        return f"ScanError({self.path!r}, {self.error!r})"


def is_video_file(path: Path) -> bool:
    """Check whether a path carries one of the supported video extensions."""
    return path.suffix.lower() in VIDEO_EXTENSIONS


def scan_media(root: Path) -> tuple[list[Path], list[ScanError]]:
    """
    Recursively collect video files under root.

    Args:
        root: A directory to walk, or a single file

    Returns:
        Tuple of (sorted list of video paths, list of scan errors)
    """
    files: list[Path] = []
    errors: list[ScanError] = []

    try:
        if root.is_file():
            return ([root] if is_video_file(root) else []), errors
        if not root.is_dir():
            raise FileNotFoundError(f"No such file or directory: '{root}'")
    except OSError as e:
        errors.append(ScanError(str(root), str(e)))
        return files, errors

    def on_error(e: OSError) -> None:
        errors.append(ScanError(e.filename or str(root), str(e)))

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        # Sorted in place so os.walk descends deterministically
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if is_video_file(path):
                files.append(path)

    return files, errors


def print_scan_errors(errors: list[ScanError], limit: int = 10) -> None:
    """Print a capped list of scan errors."""
    if not errors:
        return
    print(f"\n--- Scan Errors ({len(errors)} paths skipped) ---")
    for error in errors[:limit]:
        print(f"  Could not access path: {error.path}")
        print(f"    {error.error}")
    if len(errors) > limit:
        print(f"  ... and {len(errors) - limit} more errors")
    print("-" * 20)
