"""Maintenance command-line scripts (run as `python scripts/<name>.py`)."""
