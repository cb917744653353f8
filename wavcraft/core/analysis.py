"""
Level analysis for AudioBuffers.
"""

import numpy as np

from wavcraft.core.codec import encode_wav
from wavcraft.core.models import AnalysisReport, AudioBuffer

# Share of samples at full scale above which a buffer counts as clipping
CLIPPING_THRESHOLD_PERCENT: float = 0.1


def analyze(buffer: AudioBuffer) -> AnalysisReport:
    """
    Compute level statistics for *buffer*.

    RMS and peak are in raw sample units. Dynamic range is
    ``max_value / max(rms, 1)``; clipping counts samples whose magnitude
    reaches ``max_value``. An empty buffer reports all zeros.
    """
    max_value = buffer.max_value
    samples = buffer.samples.astype(np.float64)
    total = samples.size

    if total:
        rms = float(np.sqrt(np.mean(samples ** 2)))
        magnitudes = np.abs(samples)
        peak = int(magnitudes.max())
        clipped = int(np.count_nonzero(magnitudes >= max_value))
        clipping_percentage = clipped / total * 100
    else:
        rms = 0.0
        peak = 0
        clipping_percentage = 0.0

    return AnalysisReport(
        duration=buffer.duration,
        sample_rate=buffer.sample_rate,
        bit_depth=buffer.bit_depth,
        num_channels=buffer.num_channels,
        rms_level=rms,
        peak_level=peak,
        dynamic_range=max_value / max(rms, 1.0),
        clipping_percentage=clipping_percentage,
        is_clipping=clipping_percentage > CLIPPING_THRESHOLD_PERCENT,
        file_size=len(encode_wav(buffer)),
    )


def normalization_gain(buffer: AudioBuffer, target_level: float = 0.9) -> float:
    """
    Gain that brings the buffer's peak to ``target_level * max_value``.

    Raises:
        ValueError: Buffer is silent, so no finite gain exists
    """
    peak = int(np.abs(buffer.samples.astype(np.int64)).max()) if len(buffer) else 0
    if peak == 0:
        raise ValueError("Cannot normalize silent audio (peak level is 0)")
    return buffer.max_value * target_level / peak
