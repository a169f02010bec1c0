"""Command line interface for structcheck."""
