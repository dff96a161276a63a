"""Converters from GitHub REST payloads to prmetrics models."""
