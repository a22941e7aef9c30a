"""Convert video chapter notes to JSON and send them to a video-hosting API."""

__version__ = "0.1.0"
