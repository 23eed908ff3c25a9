"""CLI commands for chainflow."""
