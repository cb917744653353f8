"""
Buffer transforms: trim, concatenate, mix, fades, gain, reverse and
channel extraction.

All functions are pure: inputs are never modified and a new AudioBuffer
is returned. Aggregate operations take the first buffer as the reference
format and conform every other input to it.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from wavcraft.core.conversion import conform, quantize
from wavcraft.core.models import AudioBuffer
from wavcraft.utils.errors import EmptyInputError

logger = logging.getLogger(__name__)


def get_duration(buffer: AudioBuffer) -> float:
    """Duration in seconds."""
    return buffer.duration


def trim(buffer: AudioBuffer, start_time: float, end_time: float) -> AudioBuffer:
    """
    Keep the samples between *start_time* and *end_time* (seconds).

    Bounds are converted to whole frames with ``floor`` and clamped to the
    buffer, so out-of-range or inverted times give a shorter or empty
    buffer rather than an error.
    """
    channels = buffer.num_channels
    total = len(buffer)
    start = math.floor(start_time * buffer.sample_rate) * channels
    end = math.floor(end_time * buffer.sample_rate) * channels
    start = min(max(start, 0), total)
    end = min(max(end, start), total)
    return buffer.with_samples(buffer.samples[start:end])


def concatenate(buffers: Sequence[AudioBuffer]) -> AudioBuffer:
    """
    Join buffers end to end in the format of the first one.

    Raises:
        EmptyInputError: No buffers given
    """
    if not buffers:
        raise EmptyInputError(operation="concatenate")

    reference = buffers[0]
    parts = [conform(buffer, reference).samples for buffer in buffers]
    return reference.with_samples(np.concatenate(parts))


def mix(
    buffers: Sequence[AudioBuffer],
    volumes: Optional[Sequence[float]] = None,
) -> AudioBuffer:
    """
    Overlay buffers sample by sample.

    Each output sample is ``sum(sample_k * volume_k)``; shorter inputs are
    treated as silence past their end. If the result peaks above the bit
    depth's maximum, the whole mix is scaled once by ``max_value / peak``.

    Args:
        buffers: Inputs; the first one sets the output format
        volumes: Per-input gains, default ``1/N`` each

    Raises:
        EmptyInputError: No buffers given
        ValueError: *volumes* length differs from *buffers*
    """
    if not buffers:
        raise EmptyInputError(operation="mix")

    if volumes is None:
        volumes = [1.0 / len(buffers)] * len(buffers)
    if len(volumes) != len(buffers):
        raise ValueError(
            f"Got {len(volumes)} volumes for {len(buffers)} buffers"
        )

    reference = buffers[0]
    conformed = [conform(buffer, reference) for buffer in buffers]

    mixed = np.zeros(max(len(buffer) for buffer in conformed), dtype=np.float64)
    for buffer, volume in zip(conformed, volumes):
        mixed[:len(buffer)] += buffer.samples.astype(np.float64) * volume

    max_value = reference.max_value
    peak = float(np.max(np.abs(mixed))) if mixed.size else 0.0
    if peak > max_value:
        logger.debug(f"Mix peak {peak:.1f} exceeds {max_value}, normalizing")
        mixed *= max_value / peak

    return reference.with_samples(quantize(mixed, reference.bit_depth))


def _fade_length(buffer: AudioBuffer, duration: float) -> int:
    return max(0, math.floor(duration * buffer.sample_rate * buffer.num_channels))


def fade_in(buffer: AudioBuffer, duration: float) -> AudioBuffer:
    """
    Linear fade from silence over the first *duration* seconds.

    Sample ``i`` of the first ``fade_length`` interleaved samples is scaled
    by ``i / fade_length``. A fade longer than the buffer covers all of it.
    """
    fade_length = _fade_length(buffer, duration)
    if fade_length == 0:
        return buffer.with_samples(buffer.samples)

    samples = buffer.samples.astype(np.float64)
    count = min(fade_length, samples.size)
    samples[:count] *= np.arange(count) / fade_length
    return buffer.with_samples(quantize(samples, buffer.bit_depth))


def fade_out(buffer: AudioBuffer, duration: float) -> AudioBuffer:
    """
    Linear fade to silence over the last *duration* seconds.

    Sample ``i`` in the last ``fade_length`` samples is scaled by
    ``(total - i) / fade_length``.
    """
    fade_length = _fade_length(buffer, duration)
    if fade_length == 0:
        return buffer.with_samples(buffer.samples)

    samples = buffer.samples.astype(np.float64)
    total = samples.size
    start = max(total - fade_length, 0)
    samples[start:] *= (total - np.arange(start, total)) / fade_length
    return buffer.with_samples(quantize(samples, buffer.bit_depth))


def change_volume(buffer: AudioBuffer, gain: float) -> AudioBuffer:
    """
    Multiply every sample by *gain* and hard-clamp to ``[-max_value, max_value]``.

    Unlike ``mix``, overshoot is clipped per sample, not normalized. An
    infinite gain drives non-zero samples to full scale; products that are
    not a number (silence times infinity, or a NaN gain) become 0.
    """
    max_value = buffer.max_value
    with np.errstate(invalid="ignore", over="ignore"):
        scaled = buffer.samples.astype(np.float64) * gain
    scaled = np.clip(np.nan_to_num(scaled, nan=0.0), -max_value, max_value)
    return buffer.with_samples(quantize(scaled, buffer.bit_depth))


def reverse(buffer: AudioBuffer) -> AudioBuffer:
    """Reverse frame order; channel order inside each frame is kept."""
    return buffer.with_samples(buffer.frames[::-1].reshape(-1))


def extract_channel(buffer: AudioBuffer, channel: int = 0) -> AudioBuffer:
    """
    Return one channel as a mono buffer (0 = left, 1 = right).

    Mono input is returned as a copy.

    Raises:
        ValueError: *channel* is not a valid index for the buffer
    """
    if buffer.num_channels == 1:
        return buffer.with_samples(buffer.samples)
    if not 0 <= channel < buffer.num_channels:
        raise ValueError(
            f"Channel {channel} out of range for {buffer.num_channels}-channel audio"
        )

    return AudioBuffer(
        sample_rate=buffer.sample_rate,
        bit_depth=buffer.bit_depth,
        num_channels=1,
        samples=buffer.samples[channel::buffer.num_channels],
    )
