"""Reading the patch configuration file that maps instruments to patch files."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from enum import IntFlag

from wildwave.errors import ErrorCode, WildMidiError, debug_msg

DEFAULT_AMP = 1024
ENVELOPE_COUNT = 6

_WHERE = "load_config"
_DIGITS = "0123456789"
_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)
_INT_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")
_FLOAT_RE = re.compile(
    r"[ \t\n\v\f\r]*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)


class SampleMode(IntFlag):
    """Sample mode bits as stored in a patch file."""

    NONE = 0x00
    BITS16 = 0x01
    UNSIGNED = 0x02
    LOOP = 0x04
    PINGPONG = 0x08
    REVERSE = 0x10
    SUSTAIN = 0x20
    ENVELOPE = 0x40
    CLAMPED = 0x80


@dataclass
class Envelope:
    """Envelope stage override; a value only counts when its flag is set."""

    time: float = 0.0
    level: float = 0.0
    time_set: bool = False
    level_set: bool = False


def _fresh_envelopes() -> list[Envelope]:
    return [Envelope() for _ in range(ENVELOPE_COUNT)]


@dataclass
class Patch:
    """One instrument entry of the configuration."""

    patchid: int
    filename: str = ""
    amp: int = DEFAULT_AMP
    note: int = 0
    envelopes: list[Envelope] = field(default_factory=_fresh_envelopes)
    keep: SampleMode = SampleMode.NONE
    remove: SampleMode = SampleMode.NONE


@dataclass
class ReverbSettings:
    """Room geometry used by the reverb engine, in metres."""

    room_width: float = 16.875
    room_length: float = 22.5
    listen_posx: float = 8.4375
    listen_posy: float = 16.875


@dataclass
class Config:
    """Everything read from a configuration file and the files it sources."""

    patches: dict[int, Patch] = field(default_factory=dict)
    reverb: ReverbSettings = field(default_factory=ReverbSettings)
    fix_release: bool = False
    auto_amp: bool = False
    auto_amp_with_amp: bool = False

    def find_patch(self, patchid: int) -> Patch | None:
        """Return the patch defined for ``patchid``, or None."""
        return self.patches.get(patchid)


def _ascii_lower(text: str) -> str:
    return text.translate(_ASCII_LOWER)


def _is_digit(char: str) -> bool:
    return len(char) == 1 and char in _DIGITS


def _char_at(text: str, index: int) -> str:
    return text[index] if index < len(text) else ""


def _atoi(text: str) -> int:
    match = _INT_RE.match(text)
    return int(match.group(1)) if match else 0


def _atof(text: str) -> float:
    match = _FLOAT_RE.match(text)
    return float(match.group(1)) if match else 0.0


def _separators() -> tuple[str, ...]:
    return tuple(sep for sep in (os.sep, os.altsep) if sep)


def _last_separator(path: str) -> int:
    return max(path.rfind(sep) for sep in _separators())


def tokenize_line(line: str) -> list[str]:
    """Split a configuration line into blank- or tab-separated tokens.

    A ``#`` ends the line. When it follows a token without a blank in
    between, that token keeps the rest of the line, as the reader has
    always done.
    """
    tokens: list[str] = []
    start: int | None = None
    for offset, char in enumerate(line):
        if char == "#":
            if start is not None:
                tokens.append(line[start:])
                start = None
            break
        if char in " \t":
            if start is not None:
                tokens.append(line[start:offset])
                start = None
        elif start is None:
            start = offset
    if start is not None:
        tokens.append(line[start:])
    return tokens


def _read_text(path: str) -> str:
    try:
        with open(path, "rb") as handle:
            raw = handle.read()
    except OSError as exc:
        raise WildMidiError(
            ErrorCode.LOAD, f"({path})", os_errno=exc.errno or 0, where=_WHERE
        ) from exc
    return raw.decode("latin-1")


def _require_number(arg: str | None, what: str) -> str:
    if arg is None or not _is_digit(arg[:1]):
        raise WildMidiError(
            ErrorCode.INVALID_ARG, f"(syntax error in {what} line)", where=_WHERE
        )
    return arg


def _resolve(config_dir: str | None, name: str) -> str:
    if not os.path.isabs(name) and config_dir is not None:
        return config_dir + name
    return name


def _apply_patch_option(patch: Patch, token: str, path: str) -> None:
    lowered = _ascii_lower(token)
    if lowered.startswith("amp="):
        if not _is_digit(_char_at(token, 4)):
            debug_msg(f"{path}: syntax error in patch line for amp=")
        else:
            patch.amp = (_atoi(token[4:]) << 10) // 100
    elif lowered.startswith("note="):
        if not _is_digit(_char_at(token, 5)):
            debug_msg(f"{path}: syntax error in patch line for note=")
        else:
            patch.note = _atoi(token[5:])
    elif lowered.startswith("env_time"):
        if (
            not _is_digit(_char_at(token, 8))
            or not _is_digit(_char_at(token, 10))
            or _char_at(token, 9) != "="
        ):
            debug_msg(f"{path}: syntax error in patch line for env_time")
            return
        env_no = _atoi(token[8:])
        if env_no >= ENVELOPE_COUNT:
            debug_msg(f"{path}: syntax error in patch line for env_time")
            return
        envelope = patch.envelopes[env_no]
        envelope.time = _atof(token[10:])
        if envelope.time > 45000.0 or envelope.time < 1.47:
            debug_msg(f"{path}: range error in patch line env_time")
            envelope.time_set = False
        else:
            envelope.time_set = True
    elif lowered.startswith("env_level"):
        if (
            not _is_digit(_char_at(token, 9))
            or not _is_digit(_char_at(token, 11))
            or _char_at(token, 10) != "="
        ):
            debug_msg(f"{path}: syntax error in patch line for env_level")
            return
        env_no = _atoi(token[9:])
        if env_no >= ENVELOPE_COUNT:
            debug_msg(f"{path}: syntax error in patch line for env_level")
            return
        envelope = patch.envelopes[env_no]
        envelope.level = _atof(token[11:])
        if envelope.level > 1.0 or envelope.level < 0.0:
            debug_msg(f"{path}: range error in patch line for env_level")
            envelope.level_set = False
        else:
            envelope.level_set = True
    elif lowered == "keep=loop":
        patch.keep |= SampleMode.LOOP
    elif lowered == "keep=env":
        patch.keep |= SampleMode.ENVELOPE
    elif lowered == "remove=sustain":
        patch.remove |= SampleMode.SUSTAIN
    elif lowered == "remove=clamped":
        patch.remove |= SampleMode.CLAMPED


def _load_into(config: Config, path: str, conf_dir: str | None) -> None:
    text = _read_text(path)

    if conf_dir is not None:
        config_dir: str | None = conf_dir
    else:
        cut = _last_separator(path)
        config_dir = path[: cut + 1] if cut >= 0 else None

    reverb = config.reverb
    patchid = 0

    for line in re.split(r"[\r\n]", text):
        if not line:
            continue
        tokens = tokenize_line(line)
        if not tokens:
            continue
        keyword = _ascii_lower(tokens[0])
        arg = tokens[1] if len(tokens) > 1 else None

        if keyword == "dir":
            if arg is None:
                raise WildMidiError(
                    ErrorCode.INVALID_ARG, "(missing name in dir line)", where=_WHERE
                )
            config_dir = arg if arg.endswith(_separators()) else arg + os.sep
        elif keyword == "source":
            if arg is None:
                raise WildMidiError(
                    ErrorCode.INVALID_ARG, "(missing name in source line)", where=_WHERE
                )
            _load_into(config, _resolve(config_dir, arg), config_dir)
        elif keyword == "bank":
            value = _require_number(arg, "bank")
            patchid = (_atoi(value) & 0xFF) << 8
        elif keyword == "drumset":
            value = _require_number(arg, "drumset")
            patchid = ((_atoi(value) & 0xFF) << 8) | 0x80
        elif keyword == "reverb_room_width":
            reverb.room_width = _atof(_require_number(arg, "reverb_room_width"))
            if reverb.room_width < 1.0:
                debug_msg(f"{path}: reverb_room_width < 1m, setting to 1m")
                reverb.room_width = 1.0
            elif reverb.room_width > 100.0:
                debug_msg(f"{path}: reverb_room_width > 100m, setting to 100m")
                reverb.room_width = 100.0
        elif keyword == "reverb_room_length":
            reverb.room_length = _atof(_require_number(arg, "reverb_room_length"))
            if reverb.room_length < 1.0:
                debug_msg(f"{path}: reverb_room_length < 1m, setting to 1m")
                reverb.room_length = 1.0
            elif reverb.room_length > 100.0:
                debug_msg(f"{path}: reverb_room_length > 100m, setting to 100m")
                reverb.room_length = 100.0
        elif keyword == "reverb_listener_posx":
            reverb.listen_posx = _atof(_require_number(arg, "reverb_listen_posx"))
            if reverb.listen_posx > reverb.room_width or reverb.listen_posx < 0.0:
                debug_msg(f"{path}: reverb_listen_posx set outside of room")
                reverb.listen_posx = reverb.room_width / 2.0
        elif keyword == "reverb_listener_posy":
            reverb.listen_posy = _atof(_require_number(arg, "reverb_listen_posy"))
            if reverb.listen_posy > reverb.room_width or reverb.listen_posy < 0.0:
                debug_msg(f"{path}: reverb_listen_posy set outside of room")
                reverb.listen_posy = reverb.room_length * 0.75
        elif keyword == "guspat_editor_author_cant_read_so_fix_release_time_for_me":
            config.fix_release = True
        elif keyword == "auto_amp":
            config.auto_amp = True
        elif keyword == "auto_amp_with_amp":
            config.auto_amp = True
            config.auto_amp_with_amp = True
        elif _is_digit(tokens[0][:1]):
            patchid = (patchid & 0xFF80) | (_atoi(tokens[0]) & 0x7F)
            if arg is None:
                raise WildMidiError(
                    ErrorCode.INVALID_ARG, "(missing name in patch line)", where=_WHERE
                )
            filename = _resolve(config_dir, arg)
            if not _ascii_lower(filename).endswith(".pat"):
                filename += ".pat"
            patch = Patch(patchid=patchid, filename=filename)
            config.patches[patchid] = patch
            for token in tokens:
                _apply_patch_option(patch, token, path)


def load_config(path: str | os.PathLike[str], conf_dir: str | None = None) -> Config:
    """Read the configuration at ``path`` and every file it sources.

    Relative patch names are taken relative to ``conf_dir`` when given,
    otherwise to the directory holding ``path``. Syntax errors and
    unreadable files raise WildMidiError.
    """
    config = Config()
    _load_into(config, os.fspath(path), conf_dir)
    return config