"""
Animated DF Exporter Errors

Every failure surfaced by the export pipeline derives from DFExportError and
keeps the low-level exception that caused it (when there is one) on `cause`.
"""

from typing import Optional


class DFExportError(Exception):
    """Base class for export pipeline failures."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class ValidationError(DFExportError):
    """Malformed payload, missing template, or unknown base template."""


class PayloadBuildError(DFExportError):
    """The compression step failed while building a template payload."""


class TransportError(DFExportError):
    """Base class for CodeClient socket failures."""


class TransportConnectError(TransportError):
    """The socket could not be opened.

    `reason` is "error" when the connection attempt failed and "closed" when
    the remote end closed (or refused) the socket before it was established.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 reason: str = "error"):
        super().__init__(message, cause)
        self.reason = reason


class TransportSendError(TransportError):
    """A command could not be written to an established socket."""


class RemoteRejection(DFExportError):
    """CodeClient answered a command with a known rejection marker."""

    def __init__(self, message: str, marker: str,
                 cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.marker = marker


__all__ = [
    'DFExportError',
    'ValidationError',
    'PayloadBuildError',
    'TransportError',
    'TransportConnectError',
    'TransportSendError',
    'RemoteRejection',
]
