"""Command-line entry point for the activity list."""
