"""Exceptions raised by the flashcard store."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class FlashcardError(Exception):
    """Base class for every error the command line reports and exits on."""


class DataFileError(FlashcardError):
    """The data file could not be opened, read or written."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{reason}: {self.path}")


class EmptyStoreError(FlashcardError):
    """The data file holds no complete card record."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(f"no flashcard records found in {self.path}")


class MalformedRecordError(FlashcardError):
    """A record block breaks the card file grammar."""

    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


__all__ = [
    "DataFileError",
    "EmptyStoreError",
    "FlashcardError",
    "MalformedRecordError",
]
