"""Exceptions raised by the preview widget and its services."""


class PreviewError(Exception):
    """Base class for preview errors."""


class RasterUnavailableError(PreviewError):
    """The platform cannot rasterize PDF documents (pypdfium2 missing)."""

    def __init__(self, message: str = "PDF rasterization is not available on this platform"):
        super().__init__(message)


class DocumentBuildError(PreviewError):
    """The host document source failed to produce a document.

    The original exception is kept on ``__cause__``.
    """


class RasterError(PreviewError):
    """The document bytes could not be rasterized."""


class PrintError(PreviewError):
    """Printing failed."""


class ShareError(PreviewError):
    """Sharing failed."""
