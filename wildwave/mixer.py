"""Voice mixing: resampling, volume envelopes and 16-bit output packing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Sequence

from wildwave.config import SampleMode
from wildwave.resample import FPBITS, linear_interpolate

ENVELOPE_STAGES = 7
UNITY = 1024

Interpolator = Callable[[Sequence[int], int], float]


def _cdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _default_stages() -> list[int]:
    return [0] * ENVELOPE_STAGES


@dataclass
class Sample:
    """Sample data with loop points and envelope, positions in fixed point."""

    data: Sequence[int]
    loop_start: int = 0
    loop_end: int = 0
    data_length: int | None = None
    env_target: list[int] = field(default_factory=_default_stages)
    env_rate: list[int] = field(default_factory=_default_stages)
    modes: SampleMode = SampleMode.NONE

    def __post_init__(self) -> None:
        if self.data_length is None:
            self.data_length = len(self.data) << FPBITS
        if self.loop_end < self.loop_start:
            raise ValueError("loop end lies before loop start")
        if len(self.env_target) != ENVELOPE_STAGES or len(self.env_rate) != ENVELOPE_STAGES:
            raise ValueError(f"envelopes need {ENVELOPE_STAGES} stages")
        self.modes = SampleMode(self.modes)

    @property
    def loop_size(self) -> int:
        """Length of the loop in fixed point."""
        return self.loop_end - self.loop_start


class Step(Enum):
    """What the mixer does with a voice after advancing it by one frame."""

    NEXT = "next"
    AGAIN = "again"
    FINISHED = "finished"


@dataclass(eq=False)
class Voice:
    """A sounding note: position in its sample and envelope state."""

    sample: Sample
    sample_inc: int = 1 << FPBITS
    sample_pos: int = 0
    modes: SampleMode | None = None
    env: int = 0
    env_inc: int = 0
    env_level: int = 0
    left_mix_volume: int = UNITY
    right_mix_volume: int = UNITY
    is_off: bool = False
    replay: Voice | None = None
    active: bool = True
    on_release: Callable[[Voice], None] | None = None

    def __post_init__(self) -> None:
        self.modes = SampleMode(self.sample.modes if self.modes is None else self.modes)
        if self.modes & SampleMode.LOOP and self.sample.loop_size <= 0:
            raise ValueError("looping voice needs a loop of positive size")

    def _rate_towards(self, stage: int) -> int:
        rate = self.sample.env_rate[stage]
        return -rate if self.env_level >= self.sample.env_target[stage] else rate

    def advance(self) -> Step:
        """Move one frame on: sample position first, then the envelope."""
        sample = self.sample
        self.sample_pos += self.sample_inc

        if self.modes & SampleMode.LOOP:
            if self.sample_pos > sample.loop_end:
                self.sample_pos = sample.loop_start + (
                    (self.sample_pos - sample.loop_start) % sample.loop_size
                )
        elif self.sample_pos >= sample.data_length:
            return Step.FINISHED

        if self.env_inc == 0:
            return Step.NEXT

        self.env_level += self.env_inc
        target = sample.env_target[self.env]
        if self.env_inc < 0 and self.env_level > target:
            return Step.NEXT
        if self.env_inc > 0 and self.env_level < target:
            return Step.NEXT

        self.env_level = target
        if self.env == 0:
            if not self.modes & SampleMode.ENVELOPE:
                self.env_inc = 0
                return Step.NEXT
        elif self.env == 2:
            if self.modes & SampleMode.SUSTAIN:
                self.env_inc = 0
                return Step.NEXT
            stage = 5 if self.modes & SampleMode.CLAMPED else 4
            self.env = stage
            rate = sample.env_rate[stage]
            self.env_inc = -rate if self.env_level > sample.env_target[stage] else rate
            return Step.AGAIN
        elif self.env == 5:
            if self.env_level == 0:
                return Step.FINISHED
            self.modes &= ~SampleMode.LOOP
            self.env_inc = 0
            return Step.NEXT
        elif self.env >= 6:
            return Step.FINISHED

        self.env += 1
        if self.is_off and self.on_release is not None:
            self.on_release(self)
        else:
            self.env_inc = self._rate_towards(self.env)
        return Step.NEXT


class Mixer:
    """Mixes the active voices into stereo frames."""

    def __init__(self, interpolate: Interpolator = linear_interpolate) -> None:
        self.interpolate = interpolate
        self.voices: list[Voice] = []

    def add(self, voice: Voice) -> None:
        """Start mixing ``voice``."""
        voice.active = True
        self.voices.append(voice)

    def _premix(self, voice: Voice) -> int:
        value = self.interpolate(voice.sample.data, voice.sample_pos)
        level = voice.env_level >> 12
        if isinstance(value, int):
            return _cdiv(value * level, UNITY)
        return int(value * level / UNITY)

    def mix_frame(self) -> tuple[int, int]:
        """Mix one stereo frame and advance every voice."""
        left = right = 0
        voices = self.voices
        index = 0
        while index < len(voices):
            voice = voices[index]
            premix = self._premix(voice)
            left += _cdiv(premix * voice.left_mix_volume, UNITY)
            right += _cdiv(premix * voice.right_mix_volume, UNITY)

            step = voice.advance()
            if step is Step.NEXT:
                index += 1
            elif step is Step.FINISHED:
                voice.active = False
                if voice.replay is not None:
                    successor = voice.replay
                    successor.active = True
                    voices[index] = successor
                else:
                    del voices[index]
        return left, right

    def mix(self, frames: int) -> list[tuple[int, int]]:
        """Mix ``frames`` stereo frames."""
        if frames < 0:
            raise ValueError("frame count must not be negative")
        return [self.mix_frame() for _ in range(frames)]


def _to_int32(value: int) -> int:
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


def _pack_value(value: int) -> bytes:
    value = _to_int32(value)
    return bytes((value & 0xFF, ((value >> 8) & 0x7F) | ((value >> 24) & 0x80)))


def pack_frames(frames: Iterable[tuple[int, int]]) -> bytes:
    """Pack stereo frames as little-endian signed 16-bit PCM.

    The low 15 bits of each value are kept and its sign bit is carried over.
    """
    out = bytearray()
    for left, right in frames:
        out += _pack_value(left)
        out += _pack_value(right)
    return bytes(out)