"""Finalize: retire originals and rename converted files into their place."""

from typing import Callable, Optional

from .formatting import format_size
from .models import (
    FinalizeOptions,
    FinalizeStats,
    OversizedAction,
    OversizedAnswer,
    OversizedPolicy,
    PairingCandidate,
)
from .pairing import build_candidates
from .probe import Prober, durations_match, probe_media
from .resolver import ask_oversized, confirm, resolve_oversized
from .scanner import print_scan_errors


DRY_RUN_PREFIX = "[DRY RUN]"


def _delete_converted(candidate: PairingCandidate, dry_run: bool, stats: FinalizeStats) -> None:
    name = candidate.converted_path.name
    if dry_run:
        print(f"  {DRY_RUN_PREFIX} Would delete larger converted file: {name}")
    else:
        candidate.converted_path.unlink()
        print(f"  Deleted larger converted file: {name}")
    stats.converted_deleted += 1


def _delete_original(candidate: PairingCandidate, dry_run: bool, stats: FinalizeStats) -> None:
    name = candidate.original_path.name
    if dry_run:
        print(f"  {DRY_RUN_PREFIX} Would delete original: {name}")
    else:
        candidate.original_path.unlink()
        print(f"  Deleted original: {name}")
    stats.deleted += 1


def _rename_blocked(candidate: PairingCandidate) -> bool:
    """True when the final name is taken by something other than the original."""
    if not candidate.needs_rename:
        return False
    target = candidate.final_path
    retiring = candidate.original_exists and target == candidate.original_path
    return target.exists() and not retiring


def _rename_converted(candidate: PairingCandidate, dry_run: bool, stats: FinalizeStats) -> None:
    source, target = candidate.converted_path, candidate.final_path
    if dry_run:
        print(f"  {DRY_RUN_PREFIX} Would rename: {source.name} -> {target.name}")
    else:
        source.rename(target)
        print(f"  Renamed: {source.name} -> {target.name}")
    stats.renamed += 1


def process_candidate(
    candidate: PairingCandidate,
    policy: OversizedPolicy,
    stats: FinalizeStats,
    dry_run: bool = False,
    probe: Prober = probe_media,
    tolerance: float = 2.0,
    ask: Callable[[str, int, int], OversizedAnswer] = ask_oversized,
) -> OversizedPolicy:
    """
    Apply finalize actions for one candidate.

    Filesystem errors propagate to the caller. Returns the updated
    oversized-file policy. A candidate whose final name is already taken
    is refused before either file is touched.
    """
    if _rename_blocked(candidate):
        print(f"  Error: Rename target already exists: {candidate.final_path}")
        print(f"  Skipping cleanup for: {candidate.converted_path.name}")
        stats.failed += 1
        stats.failures.append(str(candidate.converted_path))
        return policy

    if candidate.original_exists:
        original_duration = probe(candidate.original_path).duration
        converted_duration = probe(candidate.converted_path).duration
        if not durations_match(original_duration, converted_duration, tolerance):
            print(
                f"  Error: Duration mismatch! Original: {original_duration:.1f}s, "
                f"Converted: {converted_duration:.1f}s"
            )
            print(f"  Skipping cleanup for: {candidate.original_path.name}")
            stats.skipped += 1
            return policy

        original_size = candidate.original_path.stat().st_size
        converted_size = candidate.converted_path.stat().st_size
        if converted_size > original_size:
            action, policy = resolve_oversized(
                policy,
                candidate.converted_path.name,
                original_size,
                converted_size,
                dry_run=dry_run,
                ask=ask,
            )
            if dry_run:
                print(
                    f"  {DRY_RUN_PREFIX} Warning: {candidate.converted_path.name} is larger than "
                    f"the original ({format_size(converted_size)} > {format_size(original_size)}). "
                    f"User would be prompted."
                )
                stats.prompts_needed += 1
            if action is OversizedAction.SKIP:
                if not dry_run:
                    print(f"  Skipping cleanup for: {candidate.original_path.name}")
                stats.skipped += 1
                return policy
            if action is OversizedAction.DELETE_CONVERTED:
                _delete_converted(candidate, dry_run, stats)
                return policy

        _delete_original(candidate, dry_run, stats)

    if candidate.needs_rename:
        _rename_converted(candidate, dry_run, stats)

    return policy


def execute_candidates(
    candidates: list[PairingCandidate],
    dry_run: bool = False,
    probe: Prober = probe_media,
    tolerance: float = 2.0,
    ask: Callable[[str, int, int], OversizedAnswer] = ask_oversized,
) -> FinalizeStats:
    """Process every candidate in order; one failure never stops the run."""
    stats = FinalizeStats()
    policy = OversizedPolicy.ASK

    for candidate in candidates:
        try:
            policy = process_candidate(
                candidate, policy, stats,
                dry_run=dry_run, probe=probe, tolerance=tolerance, ask=ask,
            )
        except OSError as e:
            print(f"  Error: Failed on {candidate.converted_path}: {e}")
            stats.failed += 1
            stats.failures.append(str(candidate.converted_path))

    return stats


def print_finalize_summary(stats: FinalizeStats, dry_run: bool) -> None:
    """Print the closing summary block."""
    print("\n" + "=" * 60)
    print("DRY RUN COMPLETE" if dry_run else "CLEANUP COMPLETE")
    print("=" * 60)
    print(f"Originals deleted: {stats.deleted}")
    print(f"Files renamed: {stats.renamed}")
    if stats.converted_deleted:
        print(f"Larger converted files deleted: {stats.converted_deleted}")
    if stats.skipped:
        print(f"Skipped: {stats.skipped}")
    if stats.prompts_needed:
        print(f"Would require a prompt: {stats.prompts_needed}")
    if stats.failed:
        print(f"Errors: {stats.failed}")


def run_finalize(
    options: FinalizeOptions,
    probe: Prober = probe_media,
    ask: Callable[[str, int, int], OversizedAnswer] = ask_oversized,
    confirm_fn: Callable[[str], bool] = confirm,
) -> Optional[FinalizeStats]:
    """
    Pair converted files with their originals and finalize them.

    Returns the run's counters, or None when the user declined the
    confirmation prompt.
    """
    print("=" * 60)
    print("FINALIZE (DRY RUN MODE)" if options.dry_run else "FINALIZE / CLEANUP")
    print("=" * 60)
    print(f"Scanning: {options.input}")

    candidates, scan_errors = build_candidates(options.input, probe=probe)
    print_scan_errors(scan_errors)

    if not candidates:
        print("Warning: No converted files found requiring finalization.")
        return FinalizeStats()

    print("-" * 20)
    print(f"Found {len(candidates)} converted files to process.")

    if not options.force and not options.dry_run:
        proceed = confirm_fn(
            f"Ready to finalize {len(candidates)} files? "
            "This will delete originals and rename the converted files."
        )
        if not proceed:
            print("Aborted.")
            return None

    print("\n" + "=" * 60)
    print("Simulating cleanup..." if options.dry_run else "Executing cleanup")
    print("=" * 60)

    stats = execute_candidates(
        candidates,
        dry_run=options.dry_run,
        probe=probe,
        tolerance=options.duration_tolerance,
        ask=ask,
    )
    print_finalize_summary(stats, options.dry_run)
    return stats
