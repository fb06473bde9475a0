"""
Core shared components for the Office Hours platform.

Provides the exception hierarchy and the DRF exception handler used by every app.
"""

__version__ = "1.0.0"
