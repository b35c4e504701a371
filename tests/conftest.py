"""Shared test fixtures."""

import json
import tempfile
from pathlib import Path
from typing import Optional

import pytest

from easy_hevc.models import ConversionRecord
from easy_hevc.probe import ProbeResult


def write_media(
    path: Path,
    duration: float = 120.0,
    size: int = 1000,
    original: Optional[str] = None,
    height: int = 1080,
) -> Path:
    """
    Write a stand-in video file.

    The file holds the JSON that file_probe() returns, padded with spaces to
    the requested size, so probe results follow the file across renames.
    """
    tags = {}
    if original is not None:
        tags = ConversionRecord(
            original_file=original,
            original_resolution=f"{height}p",
            target_resolution=f"{height}p (original)",
            crf="24",
            preset="medium",
        ).to_metadata()
    payload = json.dumps({"duration": duration, "height": height, "tags": tags})
    assert len(payload) <= size, "size too small for payload"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload.ljust(size))
    return path


def file_probe(path: Path) -> ProbeResult:
    """Probe replacement that reads the JSON written by write_media()."""
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError):
        return ProbeResult.invalid()
    return ProbeResult(
        duration=float(data["duration"]),
        height=int(data["height"]),
        tags=data["tags"],
    )


def snapshot(folder: Path) -> dict[str, bytes]:
    """Map of relative path to content for every file under folder."""
    return {
        p.relative_to(folder).as_posix(): p.read_bytes()
        for p in sorted(folder.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def movie_folder(temp_dir):
    """A folder holding movie.mp4 and its smaller converted movie_converted.mkv."""
    folder = temp_dir / "videos"
    write_media(folder / "movie.mp4", duration=120.0, size=4000)
    write_media(folder / "movie_converted.mkv", duration=120.0, size=1500, original="movie.mp4")
    return folder


@pytest.fixture
def sample_record():
    """Create a sample ConversionRecord for testing."""
    return ConversionRecord(
        original_file="clip.mp4",
        original_resolution="1080p",
        target_resolution="720p",
        crf="24",
        preset="medium",
    )
