"""Hann window, FFT pair, and vocal-band attenuation.

The band mask is a static band-stop in the frequency domain. It is not a
source separator: everything else sharing the band (bass overtones,
guitars, cymbals) is attenuated along with the voice, so results are
approximate and lossy.
"""

from __future__ import annotations

import numpy as np

from devocal._helpers import Spectrum, _ensure_finite, _hz_to_bin, _is_power_of_two
from devocal.errors import InvalidParameter


# ---------------------------------------------------------------------------
# Window
# ---------------------------------------------------------------------------


def hann_window(size: int) -> np.ndarray:
    """Symmetric Hann window ``0.5 * (1 - cos(2*pi*i / (size - 1)))``.

    Parameters
    ----------
    size : int
        Window length in samples, at least 2.

    Returns
    -------
    np.ndarray
        Read-only float64 array of *size* weights in [0, 1].
    """
    if size < 2:
        raise InvalidParameter(f"Window size must be >= 2, got {size}")
    i = np.arange(size, dtype=np.float64)
    window = 0.5 * (1.0 - np.cos(2.0 * np.pi * i / (size - 1)))
    window.flags.writeable = False
    return window


# ---------------------------------------------------------------------------
# Transform pair
# ---------------------------------------------------------------------------


def forward_transform(frame: np.ndarray, window: np.ndarray) -> Spectrum:
    """DFT of ``frame * window``.

    Parameters
    ----------
    frame : np.ndarray
        Real samples, length N (a power of two).
    window : np.ndarray
        Analysis window, length N.

    Returns
    -------
    Spectrum
        All N complex bins plus the magnitude of the first N/2.
    """
    frame = np.asarray(frame, dtype=np.float64)
    window = np.asarray(window, dtype=np.float64)
    if frame.shape != window.shape or frame.ndim != 1:
        raise InvalidParameter(
            f"frame and window must be matching 1D arrays, "
            f"got {frame.shape} and {window.shape}"
        )
    n = frame.shape[0]
    if not _is_power_of_two(n) or n < 2:
        raise InvalidParameter(f"Frame length must be a power of two >= 2, got {n}")
    bins = np.fft.fft(frame * window)
    return Spectrum(
        np.ascontiguousarray(bins.real), np.ascontiguousarray(bins.imag)
    )


def inverse_transform(spectrum: Spectrum) -> np.ndarray:
    """Inverse DFT of *spectrum*, returning the real time-domain frame.

    ``inverse_transform(forward_transform(f, w))`` equals ``f * w`` up to
    rounding as long as the spectrum stays conjugate-symmetric, which
    :func:`attenuate_band` preserves.
    """
    rec = np.fft.ifft(spectrum.complex())
    return _ensure_finite(np.ascontiguousarray(rec.real), "inverse transform")


# ---------------------------------------------------------------------------
# Band mask
# ---------------------------------------------------------------------------


def band_bins(
    fft_size: int,
    sample_rate: float,
    lower_hz: float,
    upper_hz: float,
) -> tuple[int, int]:
    """Inclusive bin range ``(lo, hi)`` covering ``[lower_hz, upper_hz]``."""
    if lower_hz > upper_hz:
        raise InvalidParameter(
            f"lower_hz ({lower_hz}) must be <= upper_hz ({upper_hz})"
        )
    lo = _hz_to_bin(lower_hz, fft_size, sample_rate)
    hi = _hz_to_bin(upper_hz, fft_size, sample_rate)
    return lo, hi


def attenuate_band(
    spectrum: Spectrum,
    sample_rate: float,
    lower_hz: float,
    upper_hz: float,
    factor: float,
) -> Spectrum:
    """Scale the bins between *lower_hz* and *upper_hz* by *factor*, in place.

    Real and imaginary parts are scaled together so phase is untouched.
    The mirrored negative-frequency bins get the same gain, keeping the
    inverse transform real.

    Parameters
    ----------
    spectrum : Spectrum
        Spectrum to modify.
    sample_rate : float
        Sample rate in Hz of the analysed frame.
    lower_hz, upper_hz : float
        Band edges in Hz.
    factor : float
        Gain in [0, 1]; 0.3 removes 70% of the band amplitude.

    Returns
    -------
    Spectrum
        The same object, mutated.
    """
    if not 0.0 <= factor <= 1.0:
        raise InvalidParameter(f"factor must be in [0, 1], got {factor}")
    n = spectrum.fft_size
    lo, hi = band_bins(n, sample_rate, lower_hz, upper_hz)

    band = slice(lo, hi + 1)
    spectrum.real[band] *= factor
    spectrum.imag[band] *= factor
    spectrum.magnitude[band] *= factor

    # Mirror bins N-k for k in [max(lo, 1), hi]; DC has no mirror
    mirror_lo = max(lo, 1)
    if mirror_lo <= hi:
        mirror = slice(n - hi, n - mirror_lo + 1)
        spectrum.real[mirror] *= factor
        spectrum.imag[mirror] *= factor

    return spectrum
