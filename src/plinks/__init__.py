"""Batch-create hosted payment links from CSV rows and check their status."""

__version__ = "0.1.0"
