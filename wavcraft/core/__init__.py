"""
Core module containing the buffer model, the buffer engine, WAV I/O and
the file workflows built on them.

Modules that pull in soundfile or librosa are loaded lazily.
"""

# Models are lightweight - import directly
from wavcraft.core.models import (
    AudioBuffer,
    AudioConfig,
    AnalysisReport,
    OperationResult,
    SegmentInfo,
    SUPPORTED_BIT_DEPTHS,
    max_sample_value,
    min_sample_value,
)

_LAZY = {
    # Engine
    "generate_tone": "wavcraft.core.generators",
    "generate_silence": "wavcraft.core.generators",
    "resample": "wavcraft.core.conversion",
    "change_bit_depth": "wavcraft.core.conversion",
    "convert_channels": "wavcraft.core.conversion",
    "conform": "wavcraft.core.conversion",
    "trim": "wavcraft.core.transforms",
    "concatenate": "wavcraft.core.transforms",
    "mix": "wavcraft.core.transforms",
    "fade_in": "wavcraft.core.transforms",
    "fade_out": "wavcraft.core.transforms",
    "change_volume": "wavcraft.core.transforms",
    "reverse": "wavcraft.core.transforms",
    "extract_channel": "wavcraft.core.transforms",
    "get_duration": "wavcraft.core.transforms",
    "analyze": "wavcraft.core.analysis",
    # WAV I/O
    "encode_wav": "wavcraft.core.codec",
    "decode_wav": "wavcraft.core.codec",
    "WavLoader": "wavcraft.core.loader",
    "create_wav_loader": "wavcraft.core.loader",
    # Workflows
    "AudioProcessor": "wavcraft.core.processor",
    "MixInput": "wavcraft.core.processor",
    "create_audio_processor": "wavcraft.core.processor",
    "BatchProcessor": "wavcraft.core.batch_processor",
    "BatchResult": "wavcraft.core.batch_processor",
    "FleetAnalysis": "wavcraft.core.batch_processor",
    "ResultWriter": "wavcraft.core.result_writer",
    "TextResultWriter": "wavcraft.core.result_writer",
    "JSONResultWriter": "wavcraft.core.result_writer",
    "create_result_writer": "wavcraft.core.result_writer",
}

__all__ = [
    # Models (always available)
    "AudioBuffer",
    "AudioConfig",
    "AnalysisReport",
    "OperationResult",
    "SegmentInfo",
    "SUPPORTED_BIT_DEPTHS",
    "max_sample_value",
    "min_sample_value",
    # Lazy loaded
    *_LAZY,
]


def __getattr__(name: str):
    """Lazy load modules with heavy dependencies."""
    module_name = _LAZY.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    import importlib
    return getattr(importlib.import_module(module_name), name)
