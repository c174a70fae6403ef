from __future__ import annotations
from pathlib import Path
from typing import Optional, Union

class Sdat2ImgError(Exception):
    """Base class for everything the converter raises on its own."""

class UsageError(Sdat2ImgError):
    pass

class TransferListFormatError(Sdat2ImgError, ValueError):
    """Malformed transfer.list. Carries the source path and 1-based line when known."""

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        line_no: Optional[int] = None,
    ) -> None:
        self.message = message
        self.path = path
        self.line_no = line_no
        super().__init__(str(self))

    def at(self, path: Optional[Union[str, Path]], line_no: Optional[int]) -> "TransferListFormatError":
        """Return a copy located at path:line_no (keeps existing location if set)."""
        return TransferListFormatError(
            self.message,
            self.path if self.path is not None else path,
            self.line_no if self.line_no is not None else line_no,
        )

    def __str__(self) -> str:
        if self.path is not None and self.line_no is not None:
            return f"{self.message} (line {self.line_no} of {self.path})"
        if self.line_no is not None:
            return f"{self.message} (line {self.line_no})"
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message

class TruncatedInputError(Sdat2ImgError, EOFError):
    def __init__(self, expected: int, got: int, begin: Optional[int] = None) -> None:
        self.expected = expected
        self.got = got
        self.begin = begin
        where = f" while filling block {begin}" if begin is not None else ""
        super().__init__(
            f"Truncated input stream{where}: wanted {expected} bytes, got {got}"
        )
