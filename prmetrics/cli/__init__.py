"""Command-line interface for prmetrics."""
