"""Incremental translation sync for app localization files."""

__version__ = "0.1.0"
