"""stitch-up: headline images to a music video."""

__version__ = "0.1.0"
