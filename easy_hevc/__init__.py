"""
Easy HEVC - A CLI tool to batch convert video files to HEVC (H.265).

Features:
- Recursive directory scanning
- Downscaling to a target resolution
- Provenance metadata embedded in every converted file
- Conflict resolution via CLI prompts
- Finalize mode to retire originals and rename converted files
- Dry-run preview of finalize actions
"""

__version__ = "1.0.0"
