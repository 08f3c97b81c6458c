"""
devocal - STFT band-stop vocal reduction for stereo audio.

Submodules:
    devocal.spectral - Hann window, FFT pair, vocal-band attenuation
    devocal.overlap  - Frame scheduling and overlap-add resynthesis
    devocal.dsp      - Stereo pipeline and peak normalization
    devocal.worker   - Request/response boundary and background worker
    devocal.config   - ProcessingParams and defaults
    devocal.buffer   - AudioBuffer container
    devocal.errors   - Error kinds

The "vocal removal" is a static attenuation of the 300-3000 Hz band (by
default). Any other content in that band is reduced too.
"""

import logging

from devocal.buffer import AudioBuffer
from devocal.config import ProcessingParams
from devocal.dsp import normalize, process, remove_vocals
from devocal.errors import (
    DevocalError,
    InvalidInput,
    InvalidParameter,
    NumericFailure,
    ProcessingCancelled,
    ShortInputWarning,
)
from devocal.worker import VocalRemovalWorker, handle_message
from devocal import spectral, overlap, dsp, worker

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AudioBuffer",
    "ProcessingParams",
    "normalize",
    "process",
    "remove_vocals",
    "DevocalError",
    "InvalidInput",
    "InvalidParameter",
    "NumericFailure",
    "ProcessingCancelled",
    "ShortInputWarning",
    "VocalRemovalWorker",
    "handle_message",
    "spectral",
    "overlap",
    "dsp",
    "worker",
]
__version__ = "0.1.0"
