"""
Error types raised by the font embedding pipeline.

Family-scoped and resource-scoped errors are contained by the pipeline;
only InvalidRequestError and InternalError reach the HTTP layer.

License: MIT
"""

from typing import Optional


class EmbeddingError(Exception):
    """Base class for all embedding failures."""
    status_code: int = 500
    public_message: str = "Failed to embed fonts"


class InvalidRequestError(EmbeddingError):
    """The top-level request has no usable font list."""
    status_code = 400
    public_message = "No fonts provided"

    def __init__(self, message: str = "No fonts provided"):
        super().__init__(message)


class InternalError(EmbeddingError):
    """Unanticipated failure while handling a request."""


class ResolutionError(EmbeddingError):
    """The font service stylesheet could not be fetched."""

    def __init__(self, family: str, status_code: Optional[int] = None, reason: str = ""):
        self.family = family
        self.upstream_status = status_code
        detail = f"status {status_code}" if status_code is not None else (reason or "request failed")
        super().__init__(f"Failed to fetch Google Fonts CSS for '{family}': {detail}")


class NoVariantsFoundError(EmbeddingError):
    """The stylesheet contained no usable @font-face blocks."""

    def __init__(self, family: str):
        self.family = family
        super().__init__(f"No font variants found for {family}")


class NoVariantsEmbeddedError(EmbeddingError):
    """Every font file download failed for a family."""

    def __init__(self, family: str):
        self.family = family
        super().__init__(f"Failed to download any font variants for {family}")


class ResourceFetchError(EmbeddingError):
    """A single font file could not be downloaded."""

    def __init__(self, url: str, status_code: Optional[int] = None, reason: str = ""):
        self.url = url
        self.upstream_status = status_code
        detail = f"status {status_code}" if status_code is not None else (reason or "request failed")
        super().__init__(f"Failed to fetch font {url}: {detail}")
