"""Utility helpers - geometry, validation, and file operations."""
