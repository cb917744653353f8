"""Shared fixtures for buffer engine and workflow tests."""

from pathlib import Path

import numpy as np
import pytest

from wavcraft.core.generators import generate_silence, generate_tone
from wavcraft.core.loader import WavLoader
from wavcraft.core.models import AudioBuffer, AudioConfig


# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------

# 8 kHz keeps multi-second fixtures small
LOW_RATE = AudioConfig(sample_rate=8000, bit_depth=16, num_channels=1, amplitude=0.5)
LOW_RATE_STEREO = AudioConfig(sample_rate=8000, bit_depth=16, num_channels=2, amplitude=0.5)


@pytest.fixture
def low_rate():
    return LOW_RATE


# ---------------------------------------------------------------------------
# Buffers
# ---------------------------------------------------------------------------


@pytest.fixture
def tone():
    """One second of 440 Hz at 8 kHz, 16-bit mono."""
    return generate_tone(440, 1.0, LOW_RATE)


@pytest.fixture
def stereo_tone():
    """One second of 220 Hz at 8 kHz, 16-bit stereo."""
    return generate_tone(220, 1.0, LOW_RATE_STEREO)


@pytest.fixture
def stereo_ramp():
    """Three stereo frames with distinct left/right values."""
    return AudioBuffer(8000, 16, 2, [1, -1, 2, -2, 3, -3])


@pytest.fixture
def silence():
    """One second of 8 kHz, 16-bit mono silence."""
    return generate_silence(1.0, LOW_RATE)


@pytest.fixture
def constant():
    """Factory: buffer whose every sample equals *value*."""
    def _make(value, frames=8000, sample_rate=8000, bit_depth=16, num_channels=1):
        return AudioBuffer(
            sample_rate=sample_rate,
            bit_depth=bit_depth,
            num_channels=num_channels,
            samples=np.full(frames * num_channels, value, dtype=np.int64),
        )
    return _make


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


@pytest.fixture
def loader():
    return WavLoader()


@pytest.fixture
def wav_file(tmp_path, loader):
    """Factory: write a buffer under tmp_path and return its path."""
    def _write(buffer: AudioBuffer, name: str = "input.wav") -> Path:
        path = tmp_path / name
        loader.save(buffer, path)
        return path
    return _write
