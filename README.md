# wildwave

Pure-Python building blocks for a wavetable MIDI synthesizer: reading a
patch configuration, interpolating sample data, mixing voices through their
volume envelopes into 16-bit PCM, recognising song formats by their headers,
and keeping the state of a library session.

## Modules

- `wildwave.config` — `load_config(path, conf_dir=None)` reads a patch
  configuration and every file it pulls in with `source`, returning a
  `Config`. Understood lines:
  - `dir <path>` — directory for relative names that follow
  - `source <file>` — read another configuration file
  - `bank <n>` / `drumset <n>` — select the bank or drum set for patch lines
  - `<program> <file> [options]` — a patch; `.pat` is appended when missing.
    Options: `amp=`, `note=`, `env_timeN=`, `env_levelN=` (N is 0–5),
    `keep=loop`, `keep=env`, `remove=sustain`, `remove=clamped`
  - `reverb_room_width`, `reverb_room_length`, `reverb_listener_posx`,
    `reverb_listener_posy` — clamped into `Config.reverb`
    (`ReverbSettings`)
  - `auto_amp`, `auto_amp_with_amp`,
    `guspat_editor_author_cant_read_so_fix_release_time_for_me` — flags on
    the `Config`

  Text after `#` is ignored. Patches are kept in `Config.patches`, keyed by
  patch id (bank in the high byte, `0x80` for drum sets, program in the low
  seven bits); `Config.find_patch(patchid)` looks one up. `tokenize_line`
  exposes the line splitter. Each `Patch` carries `Envelope` overrides and
  `SampleMode` flags for `keep` and `remove`.
- `wildwave.resample` — `linear_interpolate(data, pos)` on 10-bit fixed-point
  positions, `GaussInterpolator(order=34)` which falls back to Newton
  interpolation near the ends of a sample, and the table builders
  `newton_coefficients(order)` and `gauss_table(order, fpbits)`.
- `wildwave.mixer` — `Sample` (data, loop points and a seven-stage envelope),
  `Voice` (position, increment, envelope state, stereo volumes, optional
  `replay` voice that takes over when it ends), `Mixer` which mixes all
  added voices frame by frame, and `pack_frames` which turns stereo frames
  into little-endian signed 16-bit bytes.
- `wildwave.options` — `MixerOption` flags, `validate_init_options`,
  `apply_option` for changing playback options, `ConvertOption`,
  `ConvertOptions` (a thread-safe store), `XmiConversion` values, and
  `detect_format` / `detect_convertible` which recognise MIDI, HMP, HMI, MUS
  and XMI data by their leading bytes.
- `wildwave.library` — `Library(config_path, rate, mixer_options=0)` loads
  the configuration, checks the sample rate (11025–65535) and options, and
  holds conversion settings. Only one `Library` may be active at a time;
  `shutdown()` (or leaving a `with` block) ends it. `make_info` builds an
  `Info` record whose `total_midi_time` is in milliseconds.
- `wildwave.errors` — `ErrorCode`, `WildMidiError` (raised wherever
  something fails, with `.code` and a formatted message), `format_error` and
  `debug_msg`.

## Installation

```
pip install wildwave
```

## Examples

A library session:

```python
from wildwave.library import Library
from wildwave.options import ConvertOption, MixerOption, XmiConversion

with Library("/etc/wildmidi/wildmidi.cfg", 44100, MixerOption.REVERB) as lib:
    lib.set_cvt_option(ConvertOption.XMI_TYPE, XmiConversion.MT32_TO_GM)
    info = lib.make_info(0, 44100 * 60, MixerOption.REVERB, None)
    print(info.total_midi_time)  # 60000
    opts = lib.set_option(info.mixer_options, MixerOption.LOG_VOLUME,
                          MixerOption.LOG_VOLUME)
```

Mixing a looping voice into PCM:

```python
from wildwave.config import SampleMode
from wildwave.mixer import Mixer, Sample, Voice, pack_frames
from wildwave.resample import GaussInterpolator

sample = Sample(
    data=[0, 8000, 16000, 8000, 0, -8000, -16000, -8000],
    loop_start=0,
    loop_end=8 << 10,
    modes=SampleMode.LOOP,
)
mixer = Mixer(GaussInterpolator().interpolate)   # or linear_interpolate
mixer.add(Voice(sample, env_level=1024 << 12))
pcm = pack_frames(mixer.mix(16))                 # 64 bytes
```

Recognising a file:

```python
from wildwave.options import detect_format

with open("song.xmi", "rb") as fh:
    print(detect_format(fh.read()))   # FileFormat.XMI
```

Errors:

```python
from wildwave.errors import WildMidiError
from wildwave.library import Library

try:
    Library("missing.cfg", 44100, 0)
except WildMidiError as err:
    print(err.code, err)   # ErrorCode.LOAD ...
```

## What this package does not do

It does not parse MIDI, HMP, HMI, MUS or XMI songs into events, does not
convert XMI or MUS to MIDI (it only recognises them), and does not read
`.pat` patch files into samples: `Sample` and `Voice` objects must be built
by the caller. There is no reverb engine, no audio device output, no WAV
writer and no command-line player.

## Tests

```
pip install -e ".[test]"
pytest
```