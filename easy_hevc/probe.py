"""ffprobe wrapper for duration, height and provenance tags."""

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from .models import ConversionRecord, MediaFile


FFPROBE_BIN = "ffprobe"


@dataclass(frozen=True)
class ProbeResult:
    """Probed media properties. A duration <= 0 marks an invalid file."""
    duration: float
    height: int
    tags: dict[str, str] = field(default_factory=dict)

    @classmethod
    def invalid(cls) -> "ProbeResult":
        return cls(duration=0.0, height=0)

    @property
    def is_valid(self) -> bool:
        return self.duration > 0

    @property
    def record(self) -> Optional[ConversionRecord]:
        return ConversionRecord.from_tags(self.tags)


Prober = Callable[[Path], ProbeResult]


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_probe_output(data: dict) -> ProbeResult:
    """Extract duration, video height and format tags from ffprobe JSON."""
    fmt = data.get("format") or {}
    streams = data.get("streams") or []
    height = 0
    for stream in streams:
        if isinstance(stream, dict) and stream.get("height"):
            height = _to_int(stream.get("height"))
            break
    tags = fmt.get("tags") if isinstance(fmt.get("tags"), dict) else {}
    return ProbeResult(
        duration=_to_float(fmt.get("duration")),
        height=height,
        tags={str(k): str(v) for k, v in tags.items()},
    )


def probe_media(path: Path) -> ProbeResult:
    """
    Probe a media file with ffprobe.

    Never raises for per-file failures: unreadable or non-media files yield
    ProbeResult.invalid().
    """
    cmd = [
        FFPROBE_BIN,
        "-v", "error",
        "-select_streams", "v:0",
        "-show_streams",
        "-show_format",
        "-print_format", "json",
        str(path),
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError:
        return ProbeResult.invalid()

    if result.returncode != 0:
        return ProbeResult.invalid()

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError:
        return ProbeResult.invalid()
    if not isinstance(data, dict):
        return ProbeResult.invalid()
    return parse_probe_output(data)


def load_media(path: Path, probe: Prober = probe_media) -> MediaFile:
    """Build a MediaFile from a stat() call plus a probe."""
    size = path.stat().st_size
    info = probe(path)
    return MediaFile(
        path=path,
        size=size,
        duration=info.duration,
        height=info.height,
        record=info.record,
    )


def durations_match(first: float, second: float, tolerance: float) -> bool:
    """Both durations are valid and differ by at most tolerance seconds."""
    if first <= 0 or second <= 0:
        return False
    return abs(first - second) <= tolerance
