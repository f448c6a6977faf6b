"""Upload error types.

These keep the pipeline and storage code HTTP-agnostic; the app registers
exception handlers in ``main.py`` that map them to responses.
"""

from __future__ import annotations


class UploadError(Exception):
    """Base class for failures that abort an upload request."""

    #: Text shown to the client. Details go to the log only.
    public_message = "Something went wrong."


class BadRequestError(UploadError):
    """Raised when the request body is not a readable multipart stream."""

    public_message = "Failed to read multipart stream."


class StorageError(UploadError):
    """Raised when staging, renaming or removing a file fails."""
