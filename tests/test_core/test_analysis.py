"""Tests for level analysis."""

import pytest

from wavcraft.core.analysis import analyze, normalization_gain
from wavcraft.core.codec import encode_wav
from wavcraft.core.models import AudioBuffer


class TestAnalyze:
    def test_silence(self, silence):
        report = analyze(silence)
        assert report.rms_level == 0.0
        assert report.peak_level == 0
        assert report.clipping_percentage == 0.0
        assert report.is_clipping is False
        assert report.dynamic_range == pytest.approx(32767.0)
        assert report.duration == pytest.approx(1.0)

    def test_constant_level(self, constant):
        report = analyze(constant(-1000))
        assert report.rms_level == pytest.approx(1000.0)
        assert report.peak_level == 1000
        assert report.dynamic_range == pytest.approx(32.767)

    def test_tone_rms_is_peak_over_root_two(self, tone):
        report = analyze(tone)
        assert report.rms_level == pytest.approx(report.peak_level / 2 ** 0.5, rel=0.01)

    def test_full_scale_square_wave_clips(self):
        buffer = AudioBuffer(8000, 16, 1, [32767, -32767] * 100)
        report = analyze(buffer)
        assert report.clipping_percentage == pytest.approx(100.0)
        assert report.is_clipping is True

    def test_clipping_threshold(self):
        samples = [0] * 1999 + [32767]
        assert analyze(AudioBuffer(8000, 16, 1, samples)).is_clipping is False
        samples = [0] * 998 + [32767, -32768]
        assert analyze(AudioBuffer(8000, 16, 1, samples)).is_clipping is True

    def test_file_size_matches_encoding(self, stereo_tone):
        report = analyze(stereo_tone)
        assert report.file_size == len(encode_wav(stereo_tone))
        assert report.num_channels == 2

    def test_empty_buffer(self):
        report = analyze(AudioBuffer(44100, 24, 1, []))
        assert report.rms_level == 0.0
        assert report.peak_level == 0
        assert report.clipping_percentage == 0.0
        assert report.bit_depth == 24


class TestNormalizationGain:
    def test_gain_reaches_target(self, constant):
        gain = normalization_gain(constant(1000), 0.5)
        assert gain == pytest.approx(32767 * 0.5 / 1000)

    def test_uses_magnitude_of_negative_peak(self):
        buffer = AudioBuffer(8000, 16, 1, [100, -200])
        assert normalization_gain(buffer, 1.0) == pytest.approx(32767 / 200)

    def test_silence_raises(self, silence):
        with pytest.raises(ValueError, match="silent"):
            normalization_gain(silence)
