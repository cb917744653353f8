"""
Format conversion primitives: sample rate, bit depth and channel count.

``conform`` chains them to coerce any buffer into a reference format;
aggregate operations rely on it instead of rejecting mismatched inputs.
"""

import logging

import librosa
import numpy as np

from wavcraft.core.models import (
    AudioBuffer,
    max_sample_value,
    min_sample_value,
    validate_bit_depth,
)

logger = logging.getLogger(__name__)


def quantize(values: np.ndarray, bit_depth: int) -> np.ndarray:
    """Round half-up to integers and clip into the signed range of *bit_depth*."""
    rounded = np.floor(np.asarray(values, dtype=np.float64) + 0.5)
    return np.clip(
        rounded, min_sample_value(bit_depth), max_sample_value(bit_depth)
    ).astype(np.int64)


def resample(buffer: AudioBuffer, new_sample_rate: int) -> AudioBuffer:
    """
    Resample every channel to *new_sample_rate*.

    Uses librosa's default (soxr high quality) interpolation. Duration in
    seconds is preserved to within one output frame.
    """
    if new_sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {new_sample_rate}")
    if new_sample_rate == buffer.sample_rate:
        return buffer.with_samples(buffer.samples)
    if buffer.num_frames == 0:
        return AudioBuffer(new_sample_rate, buffer.bit_depth, buffer.num_channels, [])

    scale = float(2 ** (buffer.bit_depth - 1))
    # librosa expects (channels, frames) floating point audio
    audio = buffer.frames.T.astype(np.float64) / scale
    resampled = librosa.resample(
        audio, orig_sr=buffer.sample_rate, target_sr=new_sample_rate, axis=-1
    )

    logger.debug(
        f"Resampled {buffer.num_frames} frames {buffer.sample_rate} -> "
        f"{new_sample_rate} Hz ({resampled.shape[-1]} frames)"
    )

    return AudioBuffer(
        sample_rate=new_sample_rate,
        bit_depth=buffer.bit_depth,
        num_channels=buffer.num_channels,
        samples=quantize(resampled.T.reshape(-1) * scale, buffer.bit_depth),
    )


def change_bit_depth(buffer: AudioBuffer, new_bit_depth: int) -> AudioBuffer:
    """
    Rescale samples proportionally into a new signed range.

    Positive samples scale by ``new_max / old_max`` and negative samples by
    ``new_min / old_min``, so both range ends map exactly onto the new ends.
    """
    new_bit_depth = int(new_bit_depth)
    validate_bit_depth(new_bit_depth)
    if new_bit_depth == buffer.bit_depth:
        return buffer.with_samples(buffer.samples)

    positive_ratio = max_sample_value(new_bit_depth) / buffer.max_value
    negative_ratio = min_sample_value(new_bit_depth) / buffer.min_value

    values = buffer.samples.astype(np.float64)
    scaled = np.where(values > 0, values * positive_ratio, values * negative_ratio)

    return AudioBuffer(
        sample_rate=buffer.sample_rate,
        bit_depth=new_bit_depth,
        num_channels=buffer.num_channels,
        samples=quantize(scaled, new_bit_depth),
    )


def convert_channels(buffer: AudioBuffer, target_channels: int) -> AudioBuffer:
    """
    Change the channel count.

    Mono input is duplicated into every target channel. Multi-channel input
    is folded to mono by averaging each frame; if the target has more than
    one channel that mono signal is then duplicated.
    """
    if target_channels <= 0:
        raise ValueError(f"Channel count must be positive, got {target_channels}")
    if target_channels == buffer.num_channels:
        return buffer.with_samples(buffer.samples)

    if buffer.num_channels == 1:
        mono = buffer.samples.astype(np.int64)
    else:
        mono = quantize(buffer.frames.astype(np.float64).mean(axis=1), buffer.bit_depth)

    return AudioBuffer(
        sample_rate=buffer.sample_rate,
        bit_depth=buffer.bit_depth,
        num_channels=target_channels,
        samples=np.repeat(mono, target_channels),
    )


def conform(buffer: AudioBuffer, reference: AudioBuffer) -> AudioBuffer:
    """Coerce *buffer* to the reference's sample rate, then bit depth, then channels."""
    if buffer.format == reference.format:
        return buffer

    logger.debug(f"Conforming {buffer.format} to {reference.format}")

    if buffer.sample_rate != reference.sample_rate:
        buffer = resample(buffer, reference.sample_rate)
    if buffer.bit_depth != reference.bit_depth:
        buffer = change_bit_depth(buffer, reference.bit_depth)
    if buffer.num_channels != reference.num_channels:
        buffer = convert_channels(buffer, reference.num_channels)
    return buffer
