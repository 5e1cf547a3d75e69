"""codemap: call graph export and inspection."""

__version__ = "0.1.0"
