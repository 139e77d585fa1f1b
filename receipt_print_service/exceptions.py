"""
Receipt Print Service Exceptions
================================

Exception Hierarchy:
    TransportError (base for device-level failures)
    ├── EnumerationError        - USB bus scan failed
    ├── OpenError               - Device could not be claimed
    ├── TransferError           - A command write failed
    │   └── EndpointNotInitialized - Session open but OUT endpoint missing
    ├── CloseError              - Device release failed
    └── SessionStateError       - Operation not allowed in the session state

    PrintError (base for job outcomes, mapped to HTTP status codes)
    ├── NoContent
    ├── NoPrintersFound
    ├── PrinterNotFound
    ├── EnumerationFailed
    ├── OpenFailed
    ├── TransferFailed
    ├── CloseFailed
    └── PrintTimeout

Transport errors are raised by the registry and the session; the orchestrator
wraps them into the matching PrintError and keeps the original as ``cause``.
"""

from typing import Optional


# =============================================================================
# Transport Errors
# =============================================================================

class TransportError(Exception):
    """Base exception for USB transport failures."""


class EnumerationError(TransportError):
    """USB bus could not be scanned (missing backend, permissions)."""


class OpenError(TransportError):
    """Device could not be claimed (in use, permissions, disconnected)."""


class TransferError(TransportError):
    """A command could not be written to the device."""


class EndpointNotInitialized(TransferError):
    """Session reports open but its OUT endpoint was never resolved."""

    def __init__(self, message: str = 'USB endpoint is not initialized'):
        super().__init__(message)


class CloseError(TransportError):
    """Device handle could not be released."""


class SessionStateError(TransportError):
    """Operation attempted in a state that does not allow it."""


# =============================================================================
# Print Job Errors
# =============================================================================

class PrintError(Exception):
    """
    Base exception for print job failures.

    Each subclass carries the taxonomy ``kind`` and the HTTP ``status_code``
    the API answers with.
    """

    kind = 'PrintError'
    status_code = 500
    default_message = 'Print failed'

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class NoContent(PrintError):
    kind = 'NoContent'
    status_code = 400
    default_message = 'No content provided'


class NoPrintersFound(PrintError):
    kind = 'NoPrintersFound'
    status_code = 404
    default_message = 'No USB printers found'


class PrinterNotFound(PrintError):
    kind = 'PrinterNotFound'
    status_code = 404
    default_message = 'Selected printer not found'


class _CausedPrintError(PrintError):
    """PrintError whose message embeds the underlying transport error."""

    prefix = ''

    def __init__(self, cause: BaseException):
        super().__init__(f'{self.prefix}: {cause}', cause=cause)


class OpenFailed(_CausedPrintError):
    kind = 'OpenFailed'
    prefix = 'Failed to open USB device'


class TransferFailed(_CausedPrintError):
    kind = 'TransferFailed'
    prefix = 'Failed to send print data'


class CloseFailed(_CausedPrintError):
    kind = 'CloseFailed'
    prefix = 'Error closing printer'


class EnumerationFailed(_CausedPrintError):
    kind = 'EnumerationFailed'
    prefix = 'USB enumeration failed'


class PrintTimeout(PrintError):
    kind = 'Timeout'
    status_code = 504
    default_message = 'Print operation timed out'
