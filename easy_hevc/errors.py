"""Exception types for easy-hevc."""


class EasyHevcError(Exception):
    """Base error type."""


class MissingBinaryError(EasyHevcError, EnvironmentError):
    """A required external binary (ffmpeg/ffprobe) is missing or broken."""


class EncodeError(EasyHevcError):
    """ffmpeg exited with a non-zero status."""


class IntegrityError(EasyHevcError):
    """Converted output does not match the source duration."""
