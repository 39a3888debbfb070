"""cdist - dispatch prebuilt release binaries across platforms."""

__version__ = "0.1.0"
