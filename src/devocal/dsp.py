"""High-level vocal removal: per-channel pipeline and peak normalization.

Both channels of a stereo pair are processed with the same parameters and
a shared read-only window, but otherwise independently. Results are
float32, the same length as the input.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from devocal._helpers import _as_channel, _ensure_finite
from devocal.buffer import AudioBuffer
from devocal.config import ProcessingParams
from devocal.errors import InvalidInput, InvalidParameter
from devocal.overlap import process_channel
from devocal.spectral import hann_window

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize(buffer) -> np.ndarray:
    """Scale *buffer* so its peak absolute sample is 1.0.

    A silent buffer is returned unchanged (as a copy).
    """
    x = np.array(buffer, dtype=np.float64)
    if x.size == 0:
        return x
    peak = float(np.max(np.abs(x)))
    if peak == 0.0:
        return x
    return _ensure_finite(x / peak, "normalize")


# ---------------------------------------------------------------------------
# Channel pipeline
# ---------------------------------------------------------------------------


def _check_sample_rate(sample_rate) -> float:
    try:
        sr = float(sample_rate)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"sample_rate must be a number, got {sample_rate!r}") from e
    if not np.isfinite(sr) or sr <= 0:
        raise InvalidParameter(f"sample_rate must be positive, got {sample_rate}")
    return sr


def _run_channel(
    x: np.ndarray,
    sample_rate: float,
    params: ProcessingParams,
    window: np.ndarray,
    cancel_event: threading.Event | None,
) -> np.ndarray:
    processed = process_channel(
        x, sample_rate, params, window=window, cancel_event=cancel_event
    )
    return normalize(processed).astype(np.float32)


def process(
    left,
    right,
    sample_rate: float,
    params: ProcessingParams | None = None,
    *,
    parallel: bool = False,
    cancel_event: threading.Event | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Attenuate the vocal band of a stereo pair.

    Parameters
    ----------
    left, right : array-like
        Channel samples, equal length.
    sample_rate : float
        Sample rate in Hz, > 0.
    params : ProcessingParams or None
        Frame and band settings. Defaults to ``ProcessingParams()``.
    parallel : bool
        Process the two channels on separate threads.
    cancel_event : threading.Event or None
        Stops processing between frames when set.

    Returns
    -------
    tuple of np.ndarray
        ``(left, right)`` float32 arrays, peak-normalized per channel.
    """
    lhs = _as_channel(left, "leftChannel")
    rhs = _as_channel(right, "rightChannel")
    if lhs.shape[0] != rhs.shape[0]:
        raise InvalidInput(
            f"Channel length mismatch: left={lhs.shape[0]}, right={rhs.shape[0]}"
        )
    sr = _check_sample_rate(sample_rate)
    if params is None:
        params = ProcessingParams()

    window = hann_window(params.fft_size)
    logger.debug(
        "Removing vocals from %d samples/channel at %.0f Hz (parallel=%s)",
        lhs.shape[0],
        sr,
        parallel,
    )

    if parallel:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="devocal-ch") as ex:
            futures = [
                ex.submit(_run_channel, ch, sr, params, window, cancel_event)
                for ch in (lhs, rhs)
            ]
            out_left, out_right = [f.result() for f in futures]
    else:
        out_left = _run_channel(lhs, sr, params, window, cancel_event)
        out_right = _run_channel(rhs, sr, params, window, cancel_event)

    return out_left, out_right


def remove_vocals(
    buf: AudioBuffer,
    params: ProcessingParams | None = None,
    *,
    parallel: bool = False,
) -> AudioBuffer:
    """Run :func:`process` on a mono or stereo AudioBuffer.

    Mono input is processed as a dual-mono pair and returned as mono.
    """
    if buf.channels > 2:
        raise InvalidInput(f"Expected 1 or 2 channels, got {buf.channels}")
    out_left, out_right = process(
        buf.left, buf.right, buf.sample_rate, params, parallel=parallel
    )
    data = out_left if buf.channels == 1 else np.stack([out_left, out_right])
    return AudioBuffer(data, sample_rate=buf.sample_rate, label=buf.label)
