"""Allow running as `python -m easy_hevc`."""

from .cli import main


if __name__ == "__main__":
    main()
