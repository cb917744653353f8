"""Tests for AudioBuffer, AudioConfig and the result value objects."""

import json
from pathlib import Path

import numpy as np
import pytest

from wavcraft.core.models import (
    AnalysisReport,
    AudioBuffer,
    AudioConfig,
    OperationResult,
    SegmentInfo,
    max_sample_value,
    min_sample_value,
)
from wavcraft.utils.errors import InvalidBufferError


class TestSampleRange:
    @pytest.mark.parametrize("bit_depth, low, high", [
        (8, -128, 127),
        (16, -32768, 32767),
        (24, -8388608, 8388607),
        (32, -2147483648, 2147483647),
    ])
    def test_signed_range(self, bit_depth, low, high):
        assert min_sample_value(bit_depth) == low
        assert max_sample_value(bit_depth) == high


class TestAudioBuffer:
    def test_basic_properties(self, stereo_ramp):
        assert stereo_ramp.num_frames == 3
        assert len(stereo_ramp) == 6
        assert stereo_ramp.duration == pytest.approx(3 / 8000)
        assert stereo_ramp.format == (8000, 16, 2)
        assert stereo_ramp.frames.tolist() == [[1, -1], [2, -2], [3, -3]]

    def test_empty_buffer(self):
        buffer = AudioBuffer(44100, 16, 2, [])
        assert buffer.num_frames == 0
        assert buffer.duration == 0.0

    def test_rejects_partial_frame(self):
        with pytest.raises(InvalidBufferError, match="multiple"):
            AudioBuffer(44100, 16, 2, [1, 2, 3])

    def test_rejects_out_of_range_samples(self):
        with pytest.raises(InvalidBufferError):
            AudioBuffer(44100, 8, 1, [128])
        with pytest.raises(InvalidBufferError):
            AudioBuffer(44100, 8, 1, [-129])

    def test_accepts_range_extremes(self):
        buffer = AudioBuffer(44100, 8, 1, [-128, 127])
        assert buffer.samples.tolist() == [-128, 127]

    @pytest.mark.parametrize("sample_rate, bit_depth, channels", [
        (0, 16, 1),
        (-8000, 16, 1),
        (44100, 12, 1),
        (44100, 16, 0),
    ])
    def test_rejects_invalid_format(self, sample_rate, bit_depth, channels):
        with pytest.raises(InvalidBufferError):
            AudioBuffer(sample_rate, bit_depth, channels, [])

    def test_samples_are_copied(self):
        source = np.array([1, 2, 3, 4])
        buffer = AudioBuffer(8000, 16, 1, source)
        source[0] = 99
        assert buffer.samples[0] == 1

    def test_samples_are_read_only(self, stereo_ramp):
        with pytest.raises(ValueError):
            stereo_ramp.samples[0] = 5

    def test_fields_are_frozen(self, stereo_ramp):
        with pytest.raises(AttributeError):
            stereo_ramp.sample_rate = 48000

    def test_with_samples_keeps_format(self, stereo_ramp):
        other = stereo_ramp.with_samples([0, 0])
        assert other.format == stereo_ramp.format
        assert other.num_frames == 1
        assert stereo_ramp.num_frames == 3

    def test_equality_compares_format_and_samples(self, stereo_ramp):
        assert stereo_ramp == AudioBuffer(8000, 16, 2, [1, -1, 2, -2, 3, -3])
        assert stereo_ramp != AudioBuffer(16000, 16, 2, [1, -1, 2, -2, 3, -3])
        assert stereo_ramp != AudioBuffer(8000, 16, 2, [1, -1, 2, -2, 3, 3])


class TestAudioConfig:
    def test_defaults(self):
        config = AudioConfig()
        assert (config.sample_rate, config.bit_depth, config.num_channels) == (44100, 16, 1)
        assert config.amplitude == 0.5

    @pytest.mark.parametrize("amplitude", [-0.1, 1.5])
    def test_rejects_amplitude_outside_unit_range(self, amplitude):
        with pytest.raises(ValueError):
            AudioConfig(amplitude=amplitude)

    def test_rejects_bad_bit_depth(self):
        with pytest.raises(InvalidBufferError):
            AudioConfig(bit_depth=20)

    def test_from_dict_fills_missing_keys(self):
        config = AudioConfig.from_dict({"sample_rate": 22050, "amplitude": 1})
        assert config.sample_rate == 22050
        assert config.amplitude == 1.0
        assert config.bit_depth == 16

    def test_from_dict_none(self):
        assert AudioConfig.from_dict(None) == AudioConfig()


def _report(clipping: float = 0.0) -> AnalysisReport:
    return AnalysisReport(
        duration=1.5,
        sample_rate=44100,
        bit_depth=16,
        num_channels=2,
        rms_level=1200.0,
        peak_level=30000,
        dynamic_range=27.3,
        clipping_percentage=clipping,
        is_clipping=clipping > 0.1,
        file_size=264644,
    )


class TestAnalysisReport:
    def test_to_dict(self):
        data = _report().to_dict()
        assert data["peak_level"] == 30000
        assert data["num_channels"] == 2
        assert data["is_clipping"] is False

    def test_summary_flags_clipping(self):
        assert "CLIPPING" not in _report().get_summary()
        summary = _report(clipping=2.5).get_summary()
        assert "CLIPPING 2.50%" in summary
        assert "stereo" in summary


class TestOperationResult:
    def test_ok(self, tmp_path):
        result = OperationResult.ok("combine_sequentially", tmp_path / "out.wav", 1044,
                                    num_files=2)
        assert result.success
        assert result.output_path == tmp_path / "out.wav"
        assert result.get("num_files") == 2
        assert result.get("missing", "x") == "x"
        assert result.error is None

    def test_failure(self):
        result = OperationResult.failure("mix_together", "No WAV files provided")
        assert not result.success
        assert result.output_path is None
        data = result.to_dict()
        assert data["error"] == "No WAV files provided"
        assert "output_path" not in data

    def test_to_json_serializes_nested_metadata(self, tmp_path):
        segment = SegmentInfo(1, tmp_path / "a_segment_1.wav", 0.0, 3.0, 3.0)
        result = OperationResult.ok(
            "split_into_segments",
            tmp_path,
            2048,
            num_segments=1,
            segments=[segment],
            peak=np.int32(12),
            files=[(Path("a.wav"), _report())],
        )

        data = json.loads(result.to_json())
        assert data["output_path"] == str(tmp_path)
        assert data["segments"][0]["path"] == str(tmp_path / "a_segment_1.wav")
        assert data["peak"] == 12
        assert data["files"] == [["a.wav", _report().to_dict()]]
