"""Command line interface for pybu."""
