"""Custom exceptions for DocSplit."""

from typing import Any, Dict, List, Optional


class DocSplitError(Exception):
    """Base exception for all DocSplit errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DocumentProcessingError(DocSplitError):
    """Raised when document processing fails."""
    pass


class LoadError(DocumentProcessingError):
    """Raised when source bytes cannot be opened as a PDF."""
    pass


class RenderError(DocumentProcessingError):
    """Raised when a page preview cannot be rasterized."""
    pass


class ExtractionError(DocumentProcessingError):
    """Raised when the pages of one category cannot be composed."""
    pass


class ExtractionPartialFailure(DocumentProcessingError):
    """Raised when some categories could not be extracted.

    The categories that did succeed are still available on ``outputs``.
    """

    def __init__(
        self,
        message: str,
        failed: Dict[Any, str],
        outputs: Optional[List[Any]] = None,
    ):
        super().__init__(message, details={"failed": {str(k): v for k, v in failed.items()}})
        self.failed = failed
        self.outputs = outputs or []


class PackagingError(DocSplitError):
    """Raised when archive assembly fails."""
    pass


class StorageError(DocSplitError):
    """Raised when blob storage operations fail."""
    pass


class ValidationError(DocSplitError):
    """Raised when input validation fails."""
    pass


class DocumentNotFoundError(ValidationError):
    """Raised when a session does not hold the requested document."""
    pass
