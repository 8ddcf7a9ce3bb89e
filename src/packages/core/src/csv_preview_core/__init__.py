"""Bounded-prefix preview of delimited text files."""

__version__ = "1.0.0"
