"""Bankforge - Error taxonomy.

Every failure of the packaging pipeline is raised as a BankError subclass
carrying one of the codes below. Low-level helpers raise plain OSError;
the pipeline wraps those into BankIOError with the operation attempted.
"""

from __future__ import annotations

from enum import StrEnum


class BankErrorCode(StrEnum):
    """Error codes for bank builds."""

    NOT_FOUND = "NOT_FOUND"
    AMBIGUOUS_REFERENCE = "AMBIGUOUS_REFERENCE"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    IO_FAILURE = "IO_FAILURE"


class BankError(Exception):
    """Base exception for bank build errors."""

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


class BankNotFoundError(BankError):
    """Manifest, audio directory, banks root or alias target is missing."""

    def __init__(self, message: str):
        super().__init__(BankErrorCode.NOT_FOUND, message)


class AmbiguousBankReferenceError(BankError):
    """An alias matched more than one bank."""

    def __init__(self, alias: str, matches: list[str]):
        self.matches = matches
        super().__init__(
            BankErrorCode.AMBIGUOUS_REFERENCE,
            f"Multiple banks matched {alias} ({', '.join(matches)}); "
            "use 'bank.<author>.<name>'",
        )


class MalformedManifestError(BankError):
    """Manifest is not valid TOML, violates the schema, or lacks identity fields."""

    def __init__(self, message: str):
        super().__init__(BankErrorCode.MALFORMED_INPUT, message)


class BankIOError(BankError):
    """A read, write, create or finalize step failed."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        super().__init__(BankErrorCode.IO_FAILURE, f"Failed to {operation}: {reason}")


__all__ = [
    "BankErrorCode",
    "BankError",
    "BankNotFoundError",
    "AmbiguousBankReferenceError",
    "MalformedManifestError",
    "BankIOError",
]
