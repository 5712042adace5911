"""Blog discovery, extraction and search indexing pipeline."""

__version__ = "0.1.0"
