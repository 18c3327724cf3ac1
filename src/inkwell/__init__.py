"""inkwell: content ingestion, validation and query pipeline for a publishing site."""

__version__ = "0.3.0"
