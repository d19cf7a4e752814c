"""
Core utilities and shared components for the NEUQueue platform.

This package provides the exception hierarchy, the DRF exception handler and
pagination helpers used across the apps.
"""

__version__ = "1.0.0"
