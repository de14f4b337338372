"""MagicPages — lifecycle behavior for page classes without registration."""

__version__ = "1.0.8"
