"""ffmpeg wrapper: binary checks, command construction and encoding."""

import re
import subprocess
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from tqdm import tqdm

from .errors import MissingBinaryError
from .models import ConversionRecord, Resolution


FFMPEG_BIN = "ffmpeg"
VIDEO_CODEC = "libx265"

_TIME_RE = re.compile(r"time=\s*(\d+):(\d+):(\d+(?:\.\d+)?)")
_SPEED_RE = re.compile(r"speed=\s*([\d.]+)x")


@dataclass
class EncodeResult:
    """Outcome of one ffmpeg run."""
    returncode: int
    elapsed: float
    record: ConversionRecord
    stderr_tail: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


Encoder = Callable[..., EncodeResult]


def check_binaries(binaries: Iterable[str] = (FFMPEG_BIN, "ffprobe")) -> None:
    """Raise MissingBinaryError unless every binary runs with -version."""
    for binary in binaries:
        try:
            result = subprocess.run(
                [binary, "-version"], capture_output=True, text=True, check=False
            )
        except OSError as e:
            raise MissingBinaryError(f"{binary} not found: {e}") from e
        if result.returncode != 0:
            raise MissingBinaryError(f"{binary} error (exit code {result.returncode})")


def target_height(resolution: Resolution, source_height: int) -> Optional[int]:
    """Height to scale down to, or None when the source is kept at native size."""
    height = resolution.height
    if height is None or source_height <= height:
        return None
    return height


def build_record(
    source: Path, crf: int, preset: str, source_height: int, scale_height: Optional[int]
) -> ConversionRecord:
    """Provenance metadata for a conversion of source."""
    if scale_height is not None:
        target = f"{scale_height}p"
    else:
        target = f"{source_height}p (original)"
    return ConversionRecord(
        original_file=source.name,
        original_resolution=f"{source_height}p",
        target_resolution=target,
        crf=str(crf),
        preset=preset,
    )


def build_ffmpeg_command(
    source: Path,
    destination: Path,
    record: ConversionRecord,
    crf: int,
    preset: str,
    scale_height: Optional[int] = None,
) -> list[str]:
    """
    Build the ffmpeg argument list.

    All streams are mapped; everything but video is stream-copied so audio,
    subtitles, attachments and chapters pass through untouched.
    """
    cmd = [
        FFMPEG_BIN,
        "-hide_banner",
        "-i", str(source),
        "-map", "0",
        "-c", "copy",
        "-c:v", VIDEO_CODEC,
        "-crf", str(crf),
        "-preset", preset,
    ]
    for key, value in record.to_metadata().items():
        cmd.extend(["-metadata", f"{key}={value}"])
    if scale_height is not None:
        cmd.extend(["-vf", f"scale=-2:{scale_height}"])
    cmd.extend(["-y", str(destination)])
    return cmd


def parse_progress_time(line: str) -> Optional[float]:
    """Seconds of media encoded so far, from an ffmpeg status line."""
    match = _TIME_RE.search(line)
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def parse_progress_speed(line: str) -> Optional[str]:
    """Encoding speed (e.g. '1.25x') from an ffmpeg status line."""
    match = _SPEED_RE.search(line)
    return f"{match.group(1)}x" if match else None


def _terminate(process: subprocess.Popen) -> None:
    process.terminate()
    try:
        process.wait(timeout=5)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


def encode(
    source: Path,
    destination: Path,
    crf: int,
    preset: str,
    resolution: Resolution,
    source_height: int,
    duration: float = 0.0,
) -> EncodeResult:
    """
    Encode source into destination and report elapsed time.

    On KeyboardInterrupt ffmpeg is stopped and the partial destination is
    removed before the interrupt propagates.
    """
    scale_height = target_height(resolution, source_height)
    if scale_height is not None:
        tqdm.write(f"  Downscaling: {source_height}p -> {scale_height}p")
    else:
        tqdm.write(f"  Keeping resolution: {source_height or 'unknown'}p")

    record = build_record(source, crf, preset, source_height, scale_height)
    cmd = build_ffmpeg_command(source, destination, record, crf, preset, scale_height)

    tail: deque[str] = deque(maxlen=20)
    start = time.monotonic()
    process = subprocess.Popen(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        universal_newlines=True,
        bufsize=1,
    )
    try:
        with tqdm(
            total=round(duration, 1) if duration > 0 else None,
            desc="  Encoding",
            unit="s",
            leave=False,
            bar_format="{l_bar}{bar}| {n:.0f}/{total:.0f}s [{elapsed}<{remaining}{postfix}]"
            if duration > 0 else None,
        ) as pbar:
            for line in process.stderr:
                position = parse_progress_time(line)
                if position is None:
                    if line.strip():
                        tail.append(line.rstrip())
                    continue
                if duration > 0:
                    pbar.update(max(0.0, min(position, duration) - pbar.n))
                speed = parse_progress_speed(line)
                if speed:
                    pbar.set_postfix_str(speed)
        returncode = process.wait()
    except KeyboardInterrupt:
        tqdm.write("\nInterrupted, stopping ffmpeg...")
        _terminate(process)
        if destination.exists():
            destination.unlink()
            tqdm.write(f"  Removed partial file: {destination.name}")
        raise

    return EncodeResult(
        returncode=returncode,
        elapsed=time.monotonic() - start,
        record=record,
        stderr_tail="\n".join(tail),
    )
