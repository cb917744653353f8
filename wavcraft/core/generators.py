"""
Signal generators: sine tones and silence.
"""

import math
from typing import Optional

import numpy as np

from wavcraft.core.models import AudioBuffer, AudioConfig, max_sample_value


def generate_tone(
    frequency: float,
    duration: float,
    config: Optional[AudioConfig] = None,
) -> AudioBuffer:
    """
    Generate a sine tone.

    Frame ``i`` holds ``round(sin(2*pi*f*i/sr) * amplitude * max_value)``,
    repeated across every channel.

    Args:
        frequency: Tone frequency in Hz
        duration: Length in seconds; frame count is ``floor(duration * sr)``
        config: Output format and amplitude (defaults: 44.1 kHz, 16-bit, mono, 0.5)
    """
    config = config or AudioConfig()
    num_frames = max(0, math.floor(duration * config.sample_rate))
    max_value = max_sample_value(config.bit_depth)

    t = np.arange(num_frames, dtype=np.float64) / config.sample_rate
    wave = np.sin(2 * np.pi * frequency * t) * config.amplitude * max_value
    # Half-up rounding
    values = np.floor(wave + 0.5).astype(np.int64)

    return AudioBuffer(
        sample_rate=config.sample_rate,
        bit_depth=config.bit_depth,
        num_channels=config.num_channels,
        samples=np.repeat(values, config.num_channels),
    )


def generate_silence(
    duration: float,
    config: Optional[AudioConfig] = None,
) -> AudioBuffer:
    """
    Generate silence of ``floor(duration * sr * channels)`` zero samples.

    The count is rounded down to whole frames. ``config.amplitude`` is ignored.
    """
    config = config or AudioConfig()
    num_samples = max(0, math.floor(duration * config.sample_rate * config.num_channels))
    num_samples -= num_samples % config.num_channels

    return AudioBuffer(
        sample_rate=config.sample_rate,
        bit_depth=config.bit_depth,
        num_channels=config.num_channels,
        samples=np.zeros(num_samples, dtype=np.int64),
    )
