"""
hashdrop Backend Package

This package contains the FastAPI application that accepts multipart
uploads, deduplicates them by content hash and lists the stored names.
"""

from .main import __version__, create_app  # noqa: F401
