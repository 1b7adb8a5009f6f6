"""Exceptions raised while turning frames into readings."""

from __future__ import annotations


class DecodeError(ValueError):
    """A frame could not be decoded. Discard it and keep reading."""

    def __init__(self, message: str, frame: bytes = b"", code: int | None = None) -> None:
        super().__init__(message)
        self.frame = bytes(frame)
        self.code = code


class UnknownModeError(DecodeError):
    """The measurement type code has no table entry."""


class NoRangeTableError(DecodeError):
    """The measurement type has no range table and no flag overrides it."""


class UnknownRangeError(DecodeError):
    """The range code has no entry in the selected range table."""


class UnitTableError(RuntimeError):
    """A range table names units the normalizer does not know.

    This means the static tables are inconsistent, not that the frame
    was bad, so it is not a ``DecodeError``.
    """


class ReadExhaustedError(TimeoutError):
    """No complete frame arrived within the allowed number of reads."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"No frame received after {attempts} reads")
        self.attempts = attempts
