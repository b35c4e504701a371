"""Data models for easy-hevc."""

from dataclasses import dataclass, asdict, field
from enum import Enum
from pathlib import Path
from typing import Optional


TAG_PREFIX = "easy_hevc_"
CONTAINER_SUFFIX = ".mkv"


class Resolution(Enum):
    """Supported target heights for downscaling."""
    R4K = "2160"
    R2K = "1440"
    R1080 = "1080"
    R720 = "720"
    R540 = "540"
    R480 = "480"
    R360 = "360"
    SOURCE = "source"

    @property
    def height(self) -> Optional[int]:
        """Target height in pixels, or None to keep the native height."""
        if self is Resolution.SOURCE:
            return None
        return int(self.value)


PRESETS = ("fast", "medium", "slow", "veryslow")


class ReconvertPolicy(Enum):
    """Run-scoped memo for files that were already converted."""
    ASK = "ask"
    ALWAYS = "always"
    NEVER = "never"


class ReconvertAnswer(Enum):
    """Answers to the re-convert prompt."""
    YES = "yes"
    NO = "no"
    YES_ALL = "yes_all"
    NO_ALL = "no_all"


class OversizedPolicy(Enum):
    """Run-scoped memo for converted files larger than their original."""
    ASK = "ask"
    DELETE_CONVERTED = "delete_converted"
    KEEP_CONVERTED = "keep_converted"
    SKIP_ALL = "skip_all"


class OversizedAnswer(Enum):
    """Answers to the oversized-artifact prompt."""
    YES = "yes"
    NO = "no"
    SKIP = "skip"
    YES_ALL = "yes_all"
    NO_ALL = "no_all"
    SKIP_ALL = "skip_all"


class OversizedAction(Enum):
    """What to do with an oversized pair."""
    DELETE_CONVERTED = "delete_converted"
    DELETE_ORIGINAL = "delete_original"
    SKIP = "skip"


@dataclass(frozen=True)
class ConversionRecord:
    """Provenance metadata written into every converted file."""
    original_file: str
    original_resolution: str
    target_resolution: str
    crf: str
    preset: str

    def to_metadata(self) -> dict[str, str]:
        """Container metadata key/value pairs for ffmpeg's -metadata."""
        return {f"{TAG_PREFIX}{key}": str(value) for key, value in asdict(self).items()}

    @classmethod
    def from_tags(cls, tags: dict) -> Optional["ConversionRecord"]:
        """
        Rebuild a record from probed container tags.

        Tag names are matched case-insensitively because some muxers
        upper-case them. Returns None when the original-file tag is absent.
        """
        lowered = {str(k).lower(): str(v) for k, v in (tags or {}).items()}
        original = lowered.get(f"{TAG_PREFIX}original_file", "").strip()
        if not original:
            return None
        return cls(
            original_file=original,
            original_resolution=lowered.get(f"{TAG_PREFIX}original_resolution", ""),
            target_resolution=lowered.get(f"{TAG_PREFIX}target_resolution", ""),
            crf=lowered.get(f"{TAG_PREFIX}crf", ""),
            preset=lowered.get(f"{TAG_PREFIX}preset", ""),
        )


@dataclass
class MediaFile:
    """A video file on disk together with its probed properties."""
    path: Path
    size: int
    duration: float = 0.0
    height: int = 0
    record: Optional[ConversionRecord] = None

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def extension(self) -> str:
        return self.path.suffix

    @property
    def is_valid(self) -> bool:
        return self.duration > 0

    @property
    def is_converted(self) -> bool:
        return self.record is not None


@dataclass
class PairingCandidate:
    """A converted file considered by finalize."""
    converted_path: Path
    original_path: Path
    final_path: Path
    original_exists: bool
    needs_rename: bool


@dataclass(frozen=True)
class ConvertOptions:
    """Options for the convert command."""
    input: Path
    suffix: str = "_converted"
    resolution: Resolution = Resolution.R1080
    crf: int = 24
    preset: str = "medium"
    delete_original: bool = False
    preserve_dates: bool = True
    duration_tolerance: float = 2.0


@dataclass(frozen=True)
class FinalizeOptions:
    """Options for the finalize command."""
    input: Path
    force: bool = False
    dry_run: bool = False
    duration_tolerance: float = 2.0


@dataclass
class ConvertStats:
    """Running counters for a convert run."""
    processed: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    saved_bytes: int = 0


@dataclass
class FinalizeStats:
    """Running counters for a finalize run."""
    deleted: int = 0
    renamed: int = 0
    converted_deleted: int = 0
    skipped: int = 0
    failed: int = 0
    prompts_needed: int = 0
    failures: list[str] = field(default_factory=list)

    @property
    def mutations(self) -> int:
        return self.deleted + self.renamed + self.converted_deleted
