"""poscart - stock-aware point-of-sale cart with local persistence."""

__version__ = "0.1.0"
