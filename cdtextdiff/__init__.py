"""Parse, inspect and compare CD-TEXT pack data, and read reference sample dumps."""

__version__ = "0.1.0"