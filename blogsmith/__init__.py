"""Static-site builder for a Markdown blog."""

__version__ = "0.3.0"
