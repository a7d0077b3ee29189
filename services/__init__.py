"""
Services Package

Provides the service layer that runs long operations off the GUI thread.
"""

from services.bake_service import BakeService

__all__ = [
    "BakeService",
]
