"""Library session: initialisation, conversion options, option changes and song info."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass

from wildwave.config import Config, load_config
from wildwave.errors import ErrorCode, WildMidiError
from wildwave.options import (
    ConvertOptions,
    MixerOption,
    apply_option,
    validate_init_options,
)

DEFAULT_MASTER_VOLUME = 948

_state_lock = threading.Lock()
_active = False


@dataclass
class Info:
    """Playback details of an open song."""

    current_sample: int
    approx_total_samples: int
    mixer_options: MixerOption
    total_midi_time: int
    copyright: str | None = None


class Library:
    """An initialised synthesiser session; only one may be active at a time."""

    def __init__(
        self,
        config_path: str | os.PathLike[str] | None,
        rate: int,
        mixer_options: int = 0,
    ) -> None:
        global _active
        self.convert_options = ConvertOptions()
        self._initialized = False
        with _state_lock:
            if _active:
                raise WildMidiError(ErrorCode.ALR_INIT, where="init")
            if config_path is None:
                raise WildMidiError(
                    ErrorCode.INVALID_ARG, "(NULL config file pointer)", where="init"
                )
            self.config: Config = load_config(config_path)
            self.mixer_options, self.rate = validate_init_options(mixer_options, rate)
            self.master_volume = DEFAULT_MASTER_VOLUME
            self._initialized = True
            _active = True

    @property
    def initialized(self) -> bool:
        """True until the session is shut down."""
        return self._initialized

    def _require_init(self, where: str) -> None:
        if not self._initialized:
            raise WildMidiError(ErrorCode.NOT_INIT, where=where)

    def set_cvt_option(self, tag: int, value: int) -> None:
        """Set a conversion option; unknown tags raise WildMidiError."""
        self.convert_options.set(tag, value)

    def cvt_option(self, tag: int) -> int:
        """Return a conversion option, 0 for unknown tags."""
        return self.convert_options.get(tag)

    def set_option(self, current: int, options: int, setting: int) -> MixerOption:
        """Return ``current`` with the playback options in ``options`` changed."""
        self._require_init("set_option")
        return apply_option(current, options, setting)

    def make_info(
        self,
        current_sample: int,
        total_samples: int,
        mixer_options: int,
        copyright: str | None = None,
    ) -> Info:
        """Build the info record for a song at the session's sample rate."""
        self._require_init("get_info")
        return Info(
            current_sample=current_sample,
            approx_total_samples=total_samples,
            mixer_options=MixerOption(int(mixer_options) & 0xFFFF),
            total_midi_time=(total_samples * 1000) // self.rate,
            copyright=copyright,
        )

    def shutdown(self) -> None:
        """End the session and reset the shared settings."""
        global _active
        with _state_lock:
            self._require_init("shutdown")
            self.convert_options.reset()
            self.master_volume = DEFAULT_MASTER_VOLUME
            self.mixer_options = MixerOption.NONE
            self.config = Config()
            self._initialized = False
            _active = False

    def __enter__(self) -> "Library":
        return self

    def __exit__(self, *args: object) -> None:
        if self._initialized:
            self.shutdown()