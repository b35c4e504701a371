"""Tests for easy_hevc.__main__ module."""

import json
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

from conftest import file_probe


def fake_ffprobe(cmd, **kwargs):
    """Answer an ffprobe call from the stand-in file's JSON."""
    result = file_probe(Path(cmd[-1]))
    payload = {
        "streams": [{"codec_type": "video", "height": result.height}],
        "format": {"duration": str(result.duration), "tags": result.tags},
    }
    return subprocess.CompletedProcess(cmd, 0, stdout=json.dumps(payload), stderr="")


class TestMainModule:
    """Tests for __main__.py entry point."""

    def test_main_module_runs_finalize(self, movie_folder):
        with patch.object(sys, "argv", ["prog", "finalize", "-i", str(movie_folder), "-f"]):
            with patch("easy_hevc.cli.check_binaries"):
                with patch("easy_hevc.probe.subprocess.run", side_effect=fake_ffprobe):
                    from easy_hevc.__main__ import main
                    main()

        assert (movie_folder / "movie.mkv").exists()
        assert not (movie_folder / "movie.mp4").exists()

    def test_main_module_importable(self):
        """Test that __main__ can be imported."""
        import easy_hevc.__main__ as main_module
        assert hasattr(main_module, "main")
