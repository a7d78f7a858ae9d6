"""Domain-specific exceptions."""

from __future__ import annotations

from typing import Optional


class PaymentLinkError(Exception):
    """Base class for every error raised by csv-to-plinks."""


class InputNotFoundError(PaymentLinkError):
    """Raised when the input file does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Input file does not exist: {path}")


class OutputExistsError(PaymentLinkError):
    """Raised when the output file is already present; prior output is never overwritten."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Output file already exists: {path}")


class OutputWriteError(PaymentLinkError):
    """Raised when the output file cannot be created or written."""


class RecordParseError(PaymentLinkError):
    """Raised when a row of the input file cannot be decoded."""

    def __init__(self, path: str, line: int, reason: str) -> None:
        self.path = path
        self.line = line
        self.reason = reason
        super().__init__(f"{path}:{line}: {reason}")


class RemoteError(PaymentLinkError):
    """Raised when the payment-links API call fails or returns an unusable body."""

    def __init__(
        self, message: str, *, status_code: Optional[int] = None, body: str = ""
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"{message}: {body}" if body else message)


class MalformedLinkError(PaymentLinkError):
    """Raised when no payment request token can be extracted from a payment link."""

    def __init__(self, payment_link: str) -> None:
        self.payment_link = payment_link
        super().__init__(
            f"Failed to extract payment request token from the payment link: {payment_link}"
        )
