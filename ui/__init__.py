"""
UI Package

Provides user interface components for the PDF annotation viewer.
"""

from ui.main_window import MainWindow

__all__ = [
    "MainWindow",
]
