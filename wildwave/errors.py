"""Error codes, error messages and debug output for the synthesiser library."""

from __future__ import annotations

import os
import sys
from enum import IntEnum

MAX_ERROR_LEN = 255


class ErrorCode(IntEnum):
    """Library error codes."""

    NONE = 0
    MEM = 1
    STAT = 2
    LOAD = 3
    OPEN = 4
    READ = 5
    INVALID = 6
    CORUPT = 7
    NOT_INIT = 8
    INVALID_ARG = 9
    ALR_INIT = 10
    NOT_MIDI = 11
    LONGFIL = 12
    NOT_HMP = 13
    NOT_HMI = 14
    CONVERT = 15
    NOT_MUS = 16
    NOT_XMI = 17
    MAX = 18

    @classmethod
    def coerce(cls, code: int) -> "ErrorCode":
        """Return the matching code, or MAX for anything out of range."""
        if isinstance(code, cls):
            return code
        try:
            value = int(code)
        except (TypeError, ValueError):
            return cls.MAX
        if value < 0 or value >= cls.MAX:
            return cls.MAX
        return cls(value)

    @property
    def description(self) -> str:
        """Human readable text for this code."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ErrorCode.NONE: "No Error",
    ErrorCode.MEM: "Unable to allocate memory",
    ErrorCode.STAT: "Unable to stat",
    ErrorCode.LOAD: "Unable to load",
    ErrorCode.OPEN: "Unable to open",
    ErrorCode.READ: "Unable to read",
    ErrorCode.INVALID: "Invalid or Unsupported file format",
    ErrorCode.CORUPT: "File corrupt",
    ErrorCode.NOT_INIT: "Library not Initialized",
    ErrorCode.INVALID_ARG: "Invalid argument",
    ErrorCode.ALR_INIT: "Library Already Initialized",
    ErrorCode.NOT_MIDI: "Not a midi file",
    ErrorCode.LONGFIL: "Refusing to load unusually long file",
    ErrorCode.NOT_HMP: "Not an hmp file",
    ErrorCode.NOT_HMI: "Not an hmi file",
    ErrorCode.CONVERT: "Unable to convert",
    ErrorCode.NOT_MUS: "Not a mus file",
    ErrorCode.NOT_XMI: "Not an xmi file",
    ErrorCode.MAX: "Invalid error code",
}


def format_error(where: str, code: int, detail: str | None = None, os_errno: int = 0) -> str:
    """Build the error message for ``code`` raised at ``where``.

    ``detail`` adds context; a non-zero ``os_errno`` marks a system error and
    appends the operating system's description of it. The message is cut to
    255 characters.
    """
    text = ErrorCode.coerce(code).description
    if not os_errno:
        if detail is None:
            message = f"Error ({where}) {text}"
        else:
            message = f"Error ({where}) {detail} ({text})"
    else:
        reason = os.strerror(os_errno)
        if detail is None:
            message = f"System Error ({where}) {text} : {reason}"
        else:
            message = f"System Error ({where}) {detail} ({text}) : {reason}"
    return message[:MAX_ERROR_LEN]


class WildMidiError(Exception):
    """Raised wherever the library reports a failure."""

    def __init__(
        self,
        code: int,
        detail: str | None = None,
        os_errno: int = 0,
        where: str = "wildwave",
    ) -> None:
        self.code = ErrorCode.coerce(code)
        self.detail = detail
        self.os_errno = os_errno
        self.where = where
        super().__init__(format_error(where, self.code, detail, os_errno))


def debug_msg(message: str) -> None:
    """Print a diagnostic line to standard error."""
    sys.stderr.write(f"\r{message}\n")
    sys.stderr.flush()