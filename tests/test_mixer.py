import struct

import pytest

from wildwave.config import SampleMode
from wildwave.mixer import Mixer, Sample, Step, Voice, pack_frames
from wildwave.resample import FPBITS

FULL = 1024 << 12


def constant_sample(value, length, **kwargs):
    return Sample(data=[value] * length, **kwargs)


def test_pack_silence():
    assert pack_frames([(0, 0)]) == b"\x00\x00\x00\x00"


def test_pack_small_values():
    assert pack_frames([(1, -1)]) == b"\x01\x00\xff\xff"


@pytest.mark.parametrize("left,right", [(0, 0), (300, -300), (32767, -32768), (-2, 5)])
def test_pack_round_trip_in_range(left, right):
    assert struct.unpack("<hh", pack_frames([(left, right)])) == (left, right)


def test_pack_length():
    assert len(pack_frames([(1, 2)] * 5)) == 20


def test_empty_mixer_is_silent():
    mixer = Mixer()
    assert mixer.mix(3) == [(0, 0), (0, 0), (0, 0)]


def test_constant_voice_full_volume():
    mixer = Mixer()
    mixer.add(Voice(constant_sample(1000, 50), env_level=FULL))
    assert mixer.mix_frame() == (1000, 1000)


def test_panning_left_silent():
    mixer = Mixer()
    mixer.add(Voice(constant_sample(1000, 50), env_level=FULL, left_mix_volume=0))
    left, right = mixer.mix_frame()
    assert left == 0
    assert right == 1000


def test_non_looping_voice_finishes():
    mixer = Mixer()
    voice = Voice(constant_sample(1000, 4), env_level=FULL)
    mixer.add(voice)
    frames = mixer.mix(6)
    assert frames[:4] == [(1000, 1000)] * 4
    assert frames[4:] == [(0, 0), (0, 0)]
    assert mixer.voices == []
    assert voice.active is False


def test_replay_takes_over():
    mixer = Mixer()
    follow = Voice(constant_sample(500, 50), env_level=FULL, active=False)
    first = Voice(constant_sample(1000, 1), env_level=FULL, replay=follow)
    mixer.add(first)
    left, _ = mixer.mix_frame()
    assert left == 1500
    assert mixer.voices == [follow]
    assert follow.active is True
    assert first.active is False


def test_loop_keeps_position_in_range():
    sample = constant_sample(
        1000, 16, loop_start=4 << FPBITS, loop_end=8 << FPBITS, modes=SampleMode.LOOP
    )
    voice = Voice(sample, env_level=FULL, sample_inc=3 << FPBITS)
    mixer = Mixer()
    mixer.add(voice)
    mixer.mix(40)
    assert voice in mixer.voices
    assert sample.loop_start <= voice.sample_pos <= sample.loop_end


def test_loop_without_size_rejected():
    sample = constant_sample(1, 8, modes=SampleMode.LOOP)
    with pytest.raises(ValueError):
        Voice(sample)


def test_loop_end_before_start_rejected():
    with pytest.raises(ValueError):
        Sample(data=[0] * 8, loop_start=5, loop_end=2)


def test_attack_without_envelope_mode_holds():
    sample = constant_sample(0, 100, env_target=[FULL, 0, 0, 0, 0, 0, 0],
                             env_rate=[FULL, 0, 0, 0, 0, 0, 0])
    voice = Voice(sample, env_inc=FULL)
    assert voice.advance() is Step.NEXT
    assert voice.env == 0
    assert voice.env_inc == 0
    assert voice.env_level == FULL


def test_sustain_stops_envelope():
    sample = constant_sample(0, 100, env_target=[0, 0, 10, 0, 0, 0, 0],
                             env_rate=[0, 0, 10, 0, 0, 0, 0],
                             modes=SampleMode.SUSTAIN)
    voice = Voice(sample, env=2, env_inc=10)
    assert voice.advance() is Step.NEXT
    assert voice.env == 2
    assert voice.env_inc == 0


def test_release_stage_reaching_zero_finishes():
    sample = constant_sample(0, 100, env_rate=[0, 0, 0, 0, 0, 5, 0])
    voice = Voice(sample, env=5, env_level=5, env_inc=-5)
    assert voice.advance() is Step.FINISHED


def test_stage_two_without_sustain_moves_to_release():
    sample = constant_sample(0, 100, env_target=[0, 0, 10, 0, 0, 0, 0],
                             env_rate=[0, 0, 10, 0, 7, 0, 0])
    voice = Voice(sample, env=2, env_inc=10)
    assert voice.advance() is Step.AGAIN
    assert voice.env == 4
    assert voice.env_inc == -7


def test_custom_interpolator_is_used():
    mixer = Mixer(interpolate=lambda data, pos: 512.0)
    mixer.add(Voice(constant_sample(0, 10), env_level=FULL))
    assert mixer.mix_frame() == (512, 512)


def test_negative_frames_rejected():
    with pytest.raises(ValueError):
        Mixer().mix(-1)