"""pybu: backup plan configuration loader."""

__version__ = "0.1.0"
