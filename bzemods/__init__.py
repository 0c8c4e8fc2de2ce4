"""In-memory chain primitives and the cointrunk news-curation module."""

__version__ = "0.1.0"