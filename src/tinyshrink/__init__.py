"""Compress images in place through the TinyPNG web backend."""

__version__ = "0.1.0"
