"""Command-line entry points (``zimage``)."""
