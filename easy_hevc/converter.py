"""Convert: encode every video under a path to HEVC."""

import os
from pathlib import Path
from typing import Callable

from tqdm import tqdm

from .encoder import Encoder, encode
from .errors import EncodeError, IntegrityError
from .formatting import format_duration, format_percent, format_size
from .models import (
    CONTAINER_SUFFIX,
    ConvertOptions,
    ConvertStats,
    MediaFile,
    ReconvertAnswer,
    ReconvertPolicy,
)
from .probe import Prober, durations_match, load_media, probe_media
from .resolver import ask_reconvert, resolve_reconvert
from .scanner import print_scan_errors, scan_media


TEMP_MARKER = ".temp"


def output_paths(source: Path, suffix: str) -> tuple[Path, Path]:
    """Final and temporary output paths for a source file."""
    output = source.with_name(f"{source.stem}{suffix}{CONTAINER_SUFFIX}")
    temp = source.with_name(f"{source.stem}{suffix}{TEMP_MARKER}{CONTAINER_SUFFIX}")
    return output, temp


def remove_temp(temp: Path) -> None:
    """Delete a temp output if present; failures are reported, not raised."""
    try:
        if temp.exists():
            temp.unlink()
            print(f"  Removed temp file: {temp.name}")
    except OSError as e:
        print(f"  Warning: Could not remove temp file {temp}: {e}")


def copy_timestamps(source: Path, destination: Path) -> None:
    """Copy access and modification times from source to destination."""
    try:
        stat = source.stat()
        os.utime(destination, (stat.st_atime, stat.st_mtime))
    except OSError as e:
        print(f"  Warning: Could not copy file timestamps: {e}")


def _delete_source(source: Path) -> None:
    # The converted output is already in place; a failure here is only a warning
    try:
        source.unlink()
        tqdm.write("  Original file deleted.")
    except OSError as e:
        tqdm.write(f"  Warning: Could not delete original {source}: {e}")


def convert_file(
    media: MediaFile,
    options: ConvertOptions,
    output: Path,
    temp: Path,
    probe: Prober = probe_media,
    encode_fn: Encoder = encode,
) -> int:
    """
    Encode one file, verify it and move it into place.

    Returns:
        Bytes saved (may be zero or negative when the output grew)

    Raises:
        EncodeError: ffmpeg failed
        IntegrityError: output duration does not match the source
        OSError: a filesystem operation failed
    """
    result = encode_fn(
        media.path,
        temp,
        crf=options.crf,
        preset=options.preset,
        resolution=options.resolution,
        source_height=media.height,
        duration=media.duration,
    )
    if not result.ok:
        detail = f": {result.stderr_tail.splitlines()[-1]}" if result.stderr_tail else ""
        raise EncodeError(f"ffmpeg exited with code {result.returncode}{detail}")

    try:
        converted_duration = probe(temp).duration
        if not durations_match(media.duration, converted_duration, options.duration_tolerance):
            raise IntegrityError(
                f"Duration mismatch! Original: {media.duration:.1f}s, "
                f"Converted: {converted_duration:.1f}s"
            )

        if options.preserve_dates:
            copy_timestamps(media.path, temp)

        new_size = temp.stat().st_size
        temp.rename(output)
    except KeyboardInterrupt:
        remove_temp(temp)
        raise

    saved = media.size - new_size
    elapsed = format_duration(result.elapsed)
    if saved > 0:
        tqdm.write(
            f"  Done in {elapsed}! {format_size(media.size)} -> {format_size(new_size)}"
        )
        tqdm.write(f"  Saved: {format_size(saved)} ({format_percent(saved, media.size)})")
        if options.delete_original:
            _delete_source(media.path)
    else:
        tqdm.write(
            f"  Warning: File grew by {format_size(-saved)} (took {elapsed}). "
            "Keeping original."
        )
    return saved


def run_convert(
    options: ConvertOptions,
    probe: Prober = probe_media,
    encode_fn: Encoder = encode,
    ask: Callable[[str], ReconvertAnswer] = ask_reconvert,
) -> ConvertStats:
    """Convert every video under options.input, one file at a time."""
    print("=" * 60)
    print("STARTING VIDEO COMPRESSION")
    print("=" * 60)

    files, scan_errors = scan_media(options.input)
    print_scan_errors(scan_errors)
    stats = ConvertStats()

    if not files:
        print("Warning: No video files found.")
        return stats

    print(
        f"Found {len(files)} files. Target: {options.resolution.value}"
        f"{'p' if options.resolution.height else ''}, CRF: {options.crf}, "
        f"Preset: {options.preset}"
    )

    policy = ReconvertPolicy.ASK

    for index, path in enumerate(files, start=1):
        print("-" * 20)
        print(f"[{index}/{len(files)}] Processing: {path.name}")
        stats.processed += 1

        try:
            media = load_media(path, probe)
        except OSError as e:
            print(f"  Error: Could not read {path}: {e}")
            stats.failed += 1
            continue

        if not media.is_valid:
            print("  Skipping: Invalid video file or unable to read duration.")
            stats.skipped += 1
            continue

        if media.is_converted:
            reconvert, policy = resolve_reconvert(policy, path.name, ask=ask)
            if not reconvert:
                stats.skipped += 1
                continue

        output, temp = output_paths(path, options.suffix)
        if output.exists():
            print(f"  Skipping: Converted file already exists: {output.name}")
            stats.skipped += 1
            continue

        try:
            saved = convert_file(media, options, output, temp, probe=probe, encode_fn=encode_fn)
        except (EncodeError, IntegrityError, OSError) as e:
            print(f"  Error: Conversion failed for {path}: {e}")
            remove_temp(temp)
            stats.failed += 1
            continue

        if saved > 0:
            stats.saved_bytes += saved
            stats.succeeded += 1
        else:
            stats.skipped += 1

    print_convert_summary(stats)
    return stats


def print_convert_summary(stats: ConvertStats) -> None:
    """Print the closing summary block."""
    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print(f"Processed: {stats.processed}")
    print(f"Successful: {stats.succeeded}")
    if stats.skipped:
        print(f"Skipped: {stats.skipped}")
    if stats.failed:
        print(f"Failed: {stats.failed}")
    print(f"Total space saved: {format_size(stats.saved_bytes)}")
