"""Tests for tone and silence generation."""

import numpy as np
import pytest

from wavcraft.core.generators import generate_silence, generate_tone
from wavcraft.core.models import AudioConfig


class TestGenerateTone:
    def test_default_format(self):
        tone = generate_tone(440, 1.0)
        assert tone.format == (44100, 16, 1)
        assert tone.num_frames == 44100
        assert tone.duration == pytest.approx(1.0)

    def test_peak_follows_amplitude(self):
        tone = generate_tone(440, 1.0)
        peak = int(np.abs(tone.samples).max())
        # 0.5 * 32767 = 16383.5, rounded
        assert 16380 <= peak <= 16384

    def test_starts_at_zero(self, tone):
        assert tone.samples[0] == 0

    def test_frame_count_is_floored(self, low_rate):
        assert generate_tone(100, 0.00099, low_rate).num_frames == 7

    def test_channels_carry_identical_samples(self):
        tone = generate_tone(1000, 0.1, AudioConfig(num_channels=2))
        assert tone.num_channels == 2
        np.testing.assert_array_equal(tone.frames[:, 0], tone.frames[:, 1])

    @pytest.mark.parametrize("bit_depth", [8, 16, 24, 32])
    def test_full_amplitude_stays_in_range(self, bit_depth):
        config = AudioConfig(sample_rate=8000, bit_depth=bit_depth, amplitude=1.0)
        tone = generate_tone(2000, 0.01, config)
        assert tone.samples.max() <= tone.max_value
        assert tone.samples.min() >= tone.min_value

    def test_zero_duration(self):
        assert generate_tone(440, 0).num_frames == 0


class TestGenerateSilence:
    def test_all_zero(self, silence):
        assert silence.num_frames == 8000
        assert not silence.samples.any()

    def test_stereo_length(self):
        silence = generate_silence(1.5, AudioConfig(sample_rate=8000, num_channels=2))
        assert len(silence) == 24000
        assert silence.duration == pytest.approx(1.5)

    def test_rounds_down_to_whole_frames(self):
        config = AudioConfig(sample_rate=8000, num_channels=2)
        # floor(1/16000 * 8000 * 2) = 1 sample, less than one frame
        assert len(generate_silence(1 / 16000, config)) == 0

    def test_ignores_amplitude(self):
        silence = generate_silence(0.1, AudioConfig(amplitude=1.0))
        assert not silence.samples.any()
