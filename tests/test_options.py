import threading

import pytest

from wildwave.errors import ErrorCode, WildMidiError
from wildwave.options import (
    ConvertOption,
    ConvertOptions,
    FileFormat,
    MixerOption,
    XmiConversion,
    apply_option,
    detect_convertible,
    detect_format,
    validate_init_options,
)


def _pad(head: bytes, size: int = 32) -> bytes:
    return head + b"\x00" * (size - len(head))


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, XmiConversion.NOCONVERSION),
        (1, XmiConversion.MT32_TO_GM),
        (5, XmiConversion.GS127_TO_GS),
    ],
)
def test_xmi_conversion_values_fixed_by_header(value, expected):
    opts = ConvertOptions()
    opts.set(ConvertOption.XMI_TYPE, value)
    assert opts.get(ConvertOption.XMI_TYPE) == expected


def test_convert_options_round_trip():
    opts = ConvertOptions()
    opts.set(ConvertOption.XMI_TYPE, XmiConversion.MT32_TO_GS)
    opts.set(ConvertOption.FREQUENCY, 140)
    assert opts.get(ConvertOption.XMI_TYPE) == XmiConversion.MT32_TO_GS
    assert opts.get(ConvertOption.FREQUENCY) == 140


def test_convert_options_default_zero_and_reset():
    opts = ConvertOptions()
    assert opts.get(ConvertOption.XMI_TYPE) == 0
    opts.set(ConvertOption.FREQUENCY, 70)
    opts.reset()
    assert opts.get(ConvertOption.FREQUENCY) == 0


def test_convert_options_unknown_tag():
    opts = ConvertOptions()
    with pytest.raises(WildMidiError) as info:
        opts.set(0x7777, 1)
    assert info.value.code == ErrorCode.INVALID_ARG
    assert "(invalid setting)" in str(info.value)
    assert opts.get(0x7777) == 0


def test_convert_options_threaded_sets():
    opts = ConvertOptions()
    threads = [
        threading.Thread(target=opts.set, args=(ConvertOption.FREQUENCY, n))
        for n in range(1, 9)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert opts.get(ConvertOption.FREQUENCY) in range(1, 9)


@pytest.mark.parametrize(
    "head, expected",
    [
        (b"HMIMIDIP", FileFormat.HMP),
        (b"HMI-MIDISONG061595", FileFormat.HMI),
        (b"MUS\x1a", FileFormat.MUS),
        (b"FORM", FileFormat.XMI),
        (b"MThd", FileFormat.MIDI),
        (b"RIFF", FileFormat.MIDI),
    ],
)
def test_detect_format(head, expected):
    assert detect_format(_pad(head)) is expected


def test_detect_format_too_short():
    with pytest.raises(WildMidiError) as info:
        detect_format(b"MThd")
    assert info.value.code == ErrorCode.CORUPT
    assert "(too short)" in str(info.value)


def test_detect_format_mus_needs_eof_marker():
    assert detect_format(_pad(b"MUS!")) is FileFormat.MIDI


@pytest.mark.parametrize(
    "head, expected",
    [(b"FORM", FileFormat.XMI), (b"MUS\x1a", FileFormat.MUS), (b"MUS", FileFormat.MUS)],
)
def test_detect_convertible(head, expected):
    assert detect_convertible(_pad(head, 8)) is expected


def test_detect_convertible_rejects_midi():
    with pytest.raises(WildMidiError) as info:
        detect_convertible(_pad(b"MThd"))
    assert "Already a midi file" in str(info.value)


def test_detect_convertible_rejects_unknown():
    with pytest.raises(WildMidiError) as info:
        detect_convertible(_pad(b"ABCD"))
    assert info.value.code == ErrorCode.INVALID


def test_validate_init_options_accepts():
    opts, rate = validate_init_options(MixerOption.REVERB | MixerOption.ROUNDTEMPO, 44100)
    assert opts == MixerOption.REVERB | MixerOption.ROUNDTEMPO
    assert rate == 44100


def test_validate_init_options_rejects_reserved_bits():
    with pytest.raises(WildMidiError) as info:
        validate_init_options(0x0010, 44100)
    assert "(invalid option)" in str(info.value)


def test_validate_init_options_rejects_low_rate():
    with pytest.raises(WildMidiError) as info:
        validate_init_options(0, 8000)
    assert info.value.code == ErrorCode.INVALID_ARG
    assert "rate out of bounds" in str(info.value)


def test_apply_option_sets_and_clears():
    on = apply_option(MixerOption.NONE, MixerOption.LOG_VOLUME, MixerOption.LOG_VOLUME)
    assert on == MixerOption.LOG_VOLUME
    off = apply_option(on, MixerOption.LOG_VOLUME, 0)
    assert off == MixerOption.NONE


def test_apply_option_keeps_other_flags():
    current = MixerOption.REVERB | MixerOption.TEXTASLYRIC
    result = apply_option(current, MixerOption.LOG_VOLUME, MixerOption.LOG_VOLUME)
    assert result == current | MixerOption.LOG_VOLUME


def test_apply_option_setting_outside_options_ignored():
    result = apply_option(MixerOption.NONE, MixerOption.REVERB, MixerOption.LOG_VOLUME)
    assert result == MixerOption.NONE


@pytest.mark.parametrize("options", [0, MixerOption.ROUNDTEMPO, MixerOption.REVERB | 0x0100])
def test_apply_option_invalid_option(options):
    with pytest.raises(WildMidiError) as info:
        apply_option(0, options, 0)
    assert "(invalid option)" in str(info.value)


def test_apply_option_invalid_setting():
    with pytest.raises(WildMidiError) as info:
        apply_option(0, MixerOption.REVERB, MixerOption.STRIPSILENCE)
    assert "(invalid setting)" in str(info.value)