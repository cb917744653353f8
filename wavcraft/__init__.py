"""
WavCraft - PCM WAV Buffer Toolkit

Sample-accurate manipulation of uncompressed WAV audio: tone and silence
generation, trimming, concatenation, mixing with headroom normalization,
fades, gain, reversal, resampling, bit-depth and channel conversion, and
file-to-file workflows built on top of them.
"""

__version__ = "1.0.0"
__author__ = "WavCraft Team"
