"""Command-line interface for tabio."""
