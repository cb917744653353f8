"""Tests for the pure buffer transforms."""

import numpy as np
import pytest

from wavcraft.core.generators import generate_silence, generate_tone
from wavcraft.core.models import AudioBuffer, AudioConfig
from wavcraft.core.transforms import (
    change_volume,
    concatenate,
    extract_channel,
    fade_in,
    fade_out,
    get_duration,
    mix,
    reverse,
    trim,
)
from wavcraft.utils.errors import EmptyInputError


class TestTrim:
    def test_keeps_requested_range(self, tone):
        result = trim(tone, 0.25, 0.5)
        assert result.num_frames == 2000
        np.testing.assert_array_equal(result.samples, tone.samples[2000:4000])

    def test_stereo_trims_whole_frames(self, stereo_tone):
        result = trim(stereo_tone, 0.0, 0.5)
        assert result.num_frames == 4000
        assert len(result) == 8000

    def test_end_past_buffer_is_clamped(self, tone):
        assert trim(tone, 0.5, 5.0).num_frames == 4000

    def test_start_past_buffer_gives_empty(self, tone):
        assert trim(tone, 2.0, 3.0).num_frames == 0

    def test_inverted_range_gives_empty(self, tone):
        assert trim(tone, 0.6, 0.2).num_frames == 0

    def test_does_not_modify_input(self, tone):
        before = tone.samples.copy()
        trim(tone, 0.1, 0.2)
        np.testing.assert_array_equal(tone.samples, before)


class TestConcatenate:
    def test_durations_add(self, tone, silence):
        result = concatenate([tone, silence, tone])
        assert result.duration == pytest.approx(3.0)
        np.testing.assert_array_equal(result.samples[:8000], tone.samples)

    def test_single_buffer(self, tone):
        assert concatenate([tone]) == tone

    def test_empty_raises(self):
        with pytest.raises(EmptyInputError):
            concatenate([])

    def test_conforms_to_first_buffer(self, tone):
        other = generate_silence(0.5, AudioConfig(sample_rate=16000, bit_depth=24,
                                                  num_channels=2))
        result = concatenate([tone, other])
        assert result.format == tone.format
        assert abs(result.duration - 1.5) <= 1 / tone.sample_rate


class TestMix:
    def test_default_volumes_average(self, tone):
        assert mix([tone, tone]) == tone

    def test_mixing_with_silence_is_identity(self, tone, silence):
        assert mix([tone, silence], [1.0, 1.0]) == tone

    def test_length_is_longest_input(self, tone, low_rate):
        short = generate_tone(880, 0.25, low_rate)
        result = mix([short, tone], [1.0, 1.0])
        assert result.num_frames == tone.num_frames
        np.testing.assert_array_equal(result.samples[2000:], tone.samples[2000:])

    def test_overflow_is_normalized(self, constant):
        loud = constant(30000, frames=10)
        result = mix([loud, loud], [1.0, 1.0])
        assert result.samples.tolist() == [32767] * 10

    def test_three_tones_stay_in_range(self, low_rate):
        tones = [generate_tone(f, 0.5, low_rate) for f in (261.63, 329.63, 392.0)]
        result = mix(tones, [0.33, 0.33, 0.33])
        assert np.abs(result.samples).max() <= result.max_value
        assert result.num_frames == 4000

    def test_zero_volume_silences_input(self, tone, low_rate):
        other = generate_tone(880, 1.0, low_rate)
        assert mix([tone, other], [1.0, 0.0]) == tone

    def test_empty_raises(self):
        with pytest.raises(EmptyInputError):
            mix([])

    def test_volume_count_mismatch_raises(self, tone):
        with pytest.raises(ValueError):
            mix([tone, tone], [1.0])


class TestFades:
    def test_fade_in_ramps_from_zero(self, constant):
        result = fade_in(constant(1000), 0.5)
        assert result.samples[0] == 0
        assert result.samples[2000] == 500
        assert result.samples[3999] == 1000
        assert (result.samples[4000:] == 1000).all()

    def test_fade_out_ramps_to_zero(self, constant):
        result = fade_out(constant(1000), 0.5)
        assert (result.samples[:4000] == 1000).all()
        assert result.samples[4000] == 1000
        assert result.samples[-1] == 0

    def test_fade_longer_than_buffer(self, constant):
        result = fade_out(constant(1000), 2.0)
        # Scale starts at total / fade_length = 0.5
        assert result.samples[0] == 500
        assert result.num_frames == 8000

    def test_zero_duration_is_identity(self, tone):
        assert fade_in(tone, 0) == tone
        assert fade_out(tone, 0) == tone

    def test_fades_keep_length(self, stereo_tone):
        assert len(fade_in(stereo_tone, 0.3)) == len(stereo_tone)
        assert len(fade_out(stereo_tone, 0.3)) == len(stereo_tone)


class TestChangeVolume:
    def test_scales_samples(self):
        buffer = AudioBuffer(8000, 16, 1, [100, -100, 3])
        assert change_volume(buffer, 0.5).samples.tolist() == [50, -50, 2]

    def test_clamps_symmetrically(self):
        buffer = AudioBuffer(8000, 16, 1, [20000, -20000, -32768])
        result = change_volume(buffer, 10.0)
        assert result.samples.tolist() == [32767, -32767, -32767]

    def test_unity_gain_clamps_most_negative_sample(self):
        buffer = AudioBuffer(8000, 8, 1, [-128, 127])
        assert change_volume(buffer, 1.0).samples.tolist() == [-127, 127]

    def test_infinite_gain_clamps_and_keeps_zeros(self):
        buffer = AudioBuffer(8000, 16, 1, [5, -5, 0])
        assert change_volume(buffer, float("inf")).samples.tolist() == [32767, -32767, 0]
        assert change_volume(buffer, float("-inf")).samples.tolist() == [-32767, 32767, 0]

    def test_nan_gain_silences(self):
        buffer = AudioBuffer(8000, 16, 1, [5, -5, 0])
        assert change_volume(buffer, float("nan")).samples.tolist() == [0, 0, 0]


class TestReverse:
    def test_reverses_frames_not_channels(self, stereo_ramp):
        assert reverse(stereo_ramp).samples.tolist() == [3, -3, 2, -2, 1, -1]

    def test_is_an_involution(self, tone):
        assert reverse(reverse(tone)) == tone


class TestExtractChannel:
    def test_left_and_right(self, stereo_ramp):
        left = extract_channel(stereo_ramp, 0)
        right = extract_channel(stereo_ramp, 1)
        assert left.num_channels == right.num_channels == 1
        assert left.samples.tolist() == [1, 2, 3]
        assert right.samples.tolist() == [-1, -2, -3]

    def test_mono_is_copied(self, tone):
        assert extract_channel(tone, 1) == tone

    def test_out_of_range_channel_raises(self, stereo_ramp):
        with pytest.raises(ValueError):
            extract_channel(stereo_ramp, 2)


def test_get_duration(tone):
    assert get_duration(tone) == pytest.approx(1.0)
