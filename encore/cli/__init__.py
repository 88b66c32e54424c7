"""Command-line entry points for encore."""
