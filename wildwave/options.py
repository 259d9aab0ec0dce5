"""Conversion options, mixer option flags and input format detection."""

from __future__ import annotations

import threading
from enum import Enum, IntEnum, IntFlag

from wildwave.errors import ErrorCode, WildMidiError

MAX_FILE_SIZE = 0x1FFFFFFF
MIN_HEADER_SIZE = 18
MIN_RATE = 11025
MAX_RATE = 65535

_INIT_FORBIDDEN = 0x0FF0
_SET_ALLOWED = 0x800F
_SET_FORBIDDEN = 0x7FF0
_SET_KEEP = 0x80FF


class XmiConversion(IntEnum):
    """Instrument mapping applied when converting XMI data to MIDI."""

    NOCONVERSION = 0x00
    MT32_TO_GM = 0x01
    MT32_TO_GS = 0x02
    MT32_TO_GS127 = 0x03
    MT32_TO_GS127DRUM = 0x04
    GS127_TO_GS = 0x05


class ConvertOption(IntEnum):
    """Tags for options used when converting other formats to MIDI."""

    XMI_TYPE = 0x0010
    FREQUENCY = 0x0020


class ConvertOptions:
    """Thread-safe store of the conversion settings."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._values = {tag: 0 for tag in ConvertOption}

    def set(self, tag: int, value: int) -> None:
        """Store ``value`` for ``tag``; unknown tags raise WildMidiError."""
        with self._lock:
            try:
                key = ConvertOption(tag)
            except ValueError:
                raise WildMidiError(
                    ErrorCode.INVALID_ARG, "(invalid setting)", where="set_cvt_option"
                ) from None
            self._values[key] = int(value) & 0xFFFF

    def get(self, tag: int) -> int:
        """Return the value stored for ``tag``, or 0 for unknown tags."""
        with self._lock:
            try:
                key = ConvertOption(tag)
            except ValueError:
                return 0
            return self._values[key]

    def reset(self) -> None:
        """Set every conversion option back to 0."""
        with self._lock:
            for tag in self._values:
                self._values[tag] = 0


class FileFormat(Enum):
    """Song formats recognised by their leading bytes."""

    HMP = "hmp"
    HMI = "hmi"
    MUS = "mus"
    XMI = "xmi"
    MIDI = "midi"


def detect_format(data: bytes) -> FileFormat:
    """Identify the song format of ``data`` from its header.

    Data longer than the size limit or shorter than 18 bytes is refused.
    Anything not recognised is taken to be standard MIDI.
    """
    if data is None:
        raise WildMidiError(ErrorCode.INVALID_ARG, "(NULL midi data buffer)", where="open")
    if len(data) > MAX_FILE_SIZE:
        raise WildMidiError(ErrorCode.LONGFIL, where="open")
    if len(data) < MIN_HEADER_SIZE:
        raise WildMidiError(ErrorCode.CORUPT, "(too short)", where="open")
    head = bytes(data[:MIN_HEADER_SIZE])
    if head.startswith(b"HMIMIDIP"):
        return FileFormat.HMP
    if head == b"HMI-MIDISONG061595":
        return FileFormat.HMI
    if head.startswith(b"MUS\x1a"):
        return FileFormat.MUS
    if head.startswith(b"FORM"):
        return FileFormat.XMI
    return FileFormat.MIDI


def detect_convertible(data: bytes) -> FileFormat:
    """Identify data that can be converted to MIDI (XMI or MUS).

    MIDI data and unknown formats raise WildMidiError.
    """
    if data is None:
        raise WildMidiError(ErrorCode.INVALID_ARG, "(NULL params)", where="convert")
    head = bytes(data[:4])
    if head == b"FORM":
        return FileFormat.XMI
    if head[:3] == b"MUS":
        return FileFormat.MUS
    if head == b"MThd":
        raise WildMidiError(ErrorCode.NONE, "Already a midi file", where="convert")
    raise WildMidiError(ErrorCode.INVALID, where="convert")


class MixerOption(IntFlag):
    """Flags controlling mixing and playback."""

    NONE = 0
    LOG_VOLUME = 0x0001
    ENHANCED_RESAMPLING = 0x0002
    REVERB = 0x0004
    LOOP = 0x0008
    SAVEASTYPE0 = 0x1000
    ROUNDTEMPO = 0x2000
    STRIPSILENCE = 0x4000
    TEXTASLYRIC = 0x8000


def validate_init_options(options: int, rate: int) -> tuple[MixerOption, int]:
    """Check the options and sample rate given at initialisation."""
    options = int(options)
    if options & _INIT_FORBIDDEN:
        raise WildMidiError(ErrorCode.INVALID_ARG, "(invalid option)", where="init")
    if not MIN_RATE <= int(rate) <= MAX_RATE:
        raise WildMidiError(
            ErrorCode.INVALID_ARG,
            "(rate out of bounds, range is 11025 - 65535)",
            where="init",
        )
    return MixerOption(options & 0xFFFF), int(rate)


def apply_option(current: int, options: int, setting: int) -> MixerOption:
    """Return ``current`` with the bits in ``options`` set as in ``setting``.

    Only the playback-time options may be changed; anything else raises.
    """
    options = int(options)
    setting = int(setting)
    if not (options & _SET_ALLOWED) or (options & _SET_FORBIDDEN):
        raise WildMidiError(ErrorCode.INVALID_ARG, "(invalid option)", where="set_option")
    if setting & _SET_FORBIDDEN:
        raise WildMidiError(ErrorCode.INVALID_ARG, "(invalid setting)", where="set_option")
    value = (int(current) & (_SET_KEEP ^ options)) | (options & setting)
    return MixerOption(value & 0xFFFF)