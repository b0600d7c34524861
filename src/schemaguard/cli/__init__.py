"""Command-line host for running the analyzer over snapshot files."""
