"""Media information extraction and downloading for video and image sites."""

__version__ = "0.9.8"