"""Pairing of converted files with the originals they were made from."""

from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .models import CONTAINER_SUFFIX, ConversionRecord, PairingCandidate
from .probe import Prober, probe_media
from .scanner import ScanError, scan_media


def _same_file(first: Path, second: Path) -> bool:
    try:
        return first.resolve() == second.resolve()
    except OSError:
        return first == second


def make_candidate(
    converted_path: Path,
    record: ConversionRecord,
    container: str = CONTAINER_SUFFIX,
) -> Optional[PairingCandidate]:
    """
    Pair one tagged file with its recorded original.

    Returns None when the file is already finalized: no original is left
    and it already carries its final name.
    """
    directory = converted_path.parent
    original_path = directory / record.original_file
    final_path = directory / f"{Path(record.original_file).stem}{container}"

    # The tag may name the converted file itself after an earlier partial run
    original_exists = original_path.is_file() and not _same_file(original_path, converted_path)
    needs_rename = not _same_file(converted_path, final_path)

    if not (original_exists or needs_rename):
        return None
    return PairingCandidate(
        converted_path=converted_path,
        original_path=original_path,
        final_path=final_path,
        original_exists=original_exists,
        needs_rename=needs_rename,
    )


def build_candidates(
    root: Path,
    probe: Prober = probe_media,
    container: str = CONTAINER_SUFFIX,
) -> tuple[list[PairingCandidate], list[ScanError]]:
    """
    Scan root and build the finalize candidate list in scan order.

    Only files carrying a provenance tag are considered.
    """
    files, errors = scan_media(root)
    candidates = []

    with tqdm(files, desc="Probing", unit="file", leave=False) as pbar:
        for path in pbar:
            record = probe(path).record
            if record is None:
                continue
            candidate = make_candidate(path, record, container)
            if candidate is not None:
                candidates.append(candidate)

    return candidates, errors
