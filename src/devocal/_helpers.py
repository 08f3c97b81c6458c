"""Shared private utilities for devocal modules."""

from __future__ import annotations

import math

import numpy as np

from devocal.errors import InvalidInput, InvalidParameter, NumericFailure


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def _hz_to_bin(freq_hz: float, fft_size: int, sample_rate: float) -> int:
    """Convert Hz to the nearest FFT bin, clamped to ``[0, fft_size // 2)``.

    Halves round up, so a frequency exactly between two bins lands on the
    higher one.
    """
    if sample_rate <= 0:
        raise InvalidParameter(f"sample_rate must be positive, got {sample_rate}")
    index = int(math.floor(freq_hz * fft_size / sample_rate + 0.5))
    return min(max(index, 0), fft_size // 2 - 1)


def _as_channel(data, name: str = "channel") -> np.ndarray:
    """Return *data* as a 1D float64 array, rejecting bad shapes and values."""
    if data is None:
        raise InvalidInput(f"{name} is missing")
    try:
        arr = np.asarray(data, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"{name} is not a numeric sequence: {e}") from e
    if arr.ndim != 1:
        raise InvalidInput(f"{name} must be 1D, got {arr.ndim}D")
    if not np.all(np.isfinite(arr)):
        raise InvalidInput(f"{name} contains NaN or Inf samples")
    return arr


def _ensure_finite(arr: np.ndarray, stage: str) -> np.ndarray:
    """Raise NumericFailure if *arr* holds NaN or Inf."""
    if not np.all(np.isfinite(arr)):
        bad = int(np.count_nonzero(~np.isfinite(arr)))
        raise NumericFailure(f"{bad} non-finite value(s) produced by {stage}")
    return arr


# ---------------------------------------------------------------------------
# Spectrum container
# ---------------------------------------------------------------------------


class Spectrum:
    """Complex spectrum of one windowed frame, consumed by ``inverse_transform``.

    ``real`` and ``imag`` hold all ``fft_size`` bins. ``magnitude`` covers
    only the first ``fft_size // 2`` bins, the non-redundant half of a
    real-input spectrum.
    """

    __slots__ = ("real", "imag", "magnitude")

    def __init__(self, real: np.ndarray, imag: np.ndarray):
        if real.shape != imag.shape or real.ndim != 1:
            raise InvalidParameter(
                f"real/imag must be matching 1D arrays, got {real.shape} and {imag.shape}"
            )
        self.real = real
        self.imag = imag
        half = real.shape[0] // 2
        self.magnitude = np.sqrt(real[:half] ** 2 + imag[:half] ** 2)

    @property
    def fft_size(self) -> int:
        return self.real.shape[0]

    @property
    def frequency_bin_count(self) -> int:
        return self.magnitude.shape[0]

    def complex(self) -> np.ndarray:
        """Return the bins as a complex128 array."""
        return self.real + 1j * self.imag

    def __repr__(self) -> str:
        return f"Spectrum(fft_size={self.fft_size}, bins={self.frequency_bin_count})"
