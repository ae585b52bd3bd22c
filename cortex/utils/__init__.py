"""Shared helpers: paths, console output and file writes."""
