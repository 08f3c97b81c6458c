"""Frame scheduling and overlap-add resynthesis for one channel.

Walks a channel in Hann-windowed frames, runs each frame through
forward FFT, band attenuation and inverse FFT, and overlap-adds the
results with squared-window energy normalization.
"""

from __future__ import annotations

import logging
import threading
import warnings
from collections.abc import Iterator

import numpy as np

from devocal._helpers import _as_channel, _ensure_finite
from devocal.config import ENERGY_FLOOR, ProcessingParams
from devocal.errors import InvalidParameter, ProcessingCancelled, ShortInputWarning
from devocal.spectral import (
    attenuate_band,
    band_bins,
    forward_transform,
    hann_window,
    inverse_transform,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Frame schedule
# ---------------------------------------------------------------------------


def iter_frame_starts(length: int, fft_size: int, hop_size: int) -> Iterator[int]:
    """Yield the start offset of every frame processed for *length* samples.

    Full frames start at ``0, hop, 2*hop, ...`` while they fit. If samples
    remain past the end of the last full frame, one more (zero-padded)
    frame starts at the next hop position. Nothing is yielded when
    *length* is shorter than one frame.
    """
    if fft_size < 1 or hop_size < 1:
        raise InvalidParameter(
            f"fft_size and hop_size must be >= 1, got {fft_size}, {hop_size}"
        )
    pos = 0
    while pos + fft_size <= length:
        yield pos
        pos += hop_size
    if pos > 0 and pos - hop_size + fft_size < length:
        yield pos


def _frame_at(channel: np.ndarray, start: int, fft_size: int) -> np.ndarray:
    """Copy ``fft_size`` samples from *start*, zero-padding past the end."""
    chunk = channel[start : start + fft_size]
    if chunk.shape[0] == fft_size:
        return chunk.copy()
    padded = np.zeros(fft_size, dtype=np.float64)
    padded[: chunk.shape[0]] = chunk
    return padded


# ---------------------------------------------------------------------------
# Channel processing
# ---------------------------------------------------------------------------


def process_channel(
    channel,
    sample_rate: float,
    params: ProcessingParams | None = None,
    *,
    window: np.ndarray | None = None,
    cancel_event: threading.Event | None = None,
) -> np.ndarray:
    """Attenuate the vocal band of one channel via STFT overlap-add.

    Parameters
    ----------
    channel : array-like
        Mono samples, length M.
    sample_rate : float
        Sample rate in Hz.
    params : ProcessingParams or None
        Frame and band settings. Defaults to ``ProcessingParams()``.
    window : np.ndarray or None
        Precomputed Hann window of length ``params.fft_size``, shared
        between channels. Built here when *None*.
    cancel_event : threading.Event or None
        Checked before every frame; when set, processing stops with
        :class:`ProcessingCancelled`.

    Returns
    -------
    np.ndarray
        float64 array of length M. All zeros when M < ``fft_size``.
    """
    if params is None:
        params = ProcessingParams()
    if sample_rate <= 0:
        raise InvalidParameter(f"sample_rate must be positive, got {sample_rate}")

    x = _as_channel(channel)
    n_samples = x.shape[0]
    fft_size = params.fft_size
    hop_size = params.hop_size

    if window is None:
        window = hann_window(fft_size)
    elif window.shape != (fft_size,):
        raise InvalidParameter(
            f"window length {window.shape[0]} does not match fft_size {fft_size}"
        )

    out = np.zeros(n_samples, dtype=np.float64)
    energy = np.zeros(n_samples, dtype=np.float64)

    if n_samples < fft_size:
        warnings.warn(
            f"Input of {n_samples} samples is shorter than one frame "
            f"({fft_size}); returning silence",
            ShortInputWarning,
            stacklevel=2,
        )
        return out

    if logger.isEnabledFor(logging.DEBUG):
        lo, hi = band_bins(fft_size, sample_rate, params.lower_hz, params.upper_hz)
        logger.debug(
            "Processing %d samples: fft_size=%d hop=%d band bins %d..%d",
            n_samples,
            fft_size,
            hop_size,
            lo,
            hi,
        )

    win_sq = window**2
    n_frames = 0
    for start in iter_frame_starts(n_samples, fft_size, hop_size):
        if cancel_event is not None and cancel_event.is_set():
            raise ProcessingCancelled(
                f"Cancelled after {n_frames} frame(s) at sample {start}"
            )

        frame = _frame_at(x, start, fft_size)
        spectrum = forward_transform(frame, window)
        attenuate_band(
            spectrum,
            sample_rate,
            params.lower_hz,
            params.upper_hz,
            params.attenuation,
        )
        rec = inverse_transform(spectrum)

        # Trim the padded tail frame to the buffer end
        span = min(fft_size, n_samples - start)
        out[start : start + span] += rec[:span] * window[:span]
        energy[start : start + span] += win_sq[:span]
        n_frames += 1

    # Buffer edges covered only by a window's tail fade out under the floor
    out /= np.maximum(energy, ENERGY_FLOOR * float(win_sq.max()))

    logger.debug("Overlap-added %d frame(s)", n_frames)
    return _ensure_finite(out, "overlap-add")
