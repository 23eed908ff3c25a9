"""Command-line interface for chainflow."""
