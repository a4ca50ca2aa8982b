"""codeshare: a social code-sharing backend."""

__version__ = "0.1.0"
