"""Processing parameters and their defaults."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from devocal._helpers import _is_power_of_two
from devocal.errors import InvalidParameter


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_FFT_SIZE = 2048
DEFAULT_OVERLAP = 4  # hop = fft_size / 4, i.e. 75% overlap
DEFAULT_LOWER_HZ = 300.0
DEFAULT_UPPER_HZ = 3000.0
DEFAULT_ATTENUATION = 0.3

# Fraction of the peak squared-window value used as the overlap-add
# divisor floor; single-frame buffer edges fade out below it
ENERGY_FLOOR = 1e-3

# camelCase message option -> ProcessingParams field
_OPTION_FIELDS: dict[str, str] = {
    "fftSize": "fft_size",
    "hopSize": "hop_size",
    "lowerHz": "lower_hz",
    "upperHz": "upper_hz",
    "attenuation": "attenuation",
}


# ---------------------------------------------------------------------------
# ProcessingParams
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProcessingParams:
    """Immutable configuration for one vocal-removal invocation.

    The sample rate is not part of the parameters; it travels with the
    audio and is passed to each call.

    Attributes:
        fft_size: Frame length in samples, a power of two.
        hop_size: Frame advance in samples. ``None`` means ``fft_size // 4``.
        lower_hz: Lower edge of the attenuated band.
        upper_hz: Upper edge of the attenuated band.
        attenuation: Gain applied to the band, 0.0 (remove) to 1.0 (keep).
    """

    fft_size: int = DEFAULT_FFT_SIZE
    hop_size: int | None = None
    lower_hz: float = DEFAULT_LOWER_HZ
    upper_hz: float = DEFAULT_UPPER_HZ
    attenuation: float = DEFAULT_ATTENUATION

    def __post_init__(self):
        if isinstance(self.fft_size, bool) or not isinstance(self.fft_size, int):
            raise InvalidParameter(
                f"fft_size must be an integer, got {self.fft_size!r}"
            )
        if self.fft_size < 2 or not _is_power_of_two(self.fft_size):
            raise InvalidParameter(
                f"fft_size must be a power of two >= 2, got {self.fft_size}"
            )
        if self.hop_size is None:
            object.__setattr__(
                self, "hop_size", max(1, self.fft_size // DEFAULT_OVERLAP)
            )
        if not 0 < self.hop_size <= self.fft_size:
            raise InvalidParameter(
                f"hop_size must be in (0, {self.fft_size}], got {self.hop_size}"
            )
        if self.lower_hz < 0:
            raise InvalidParameter(
                f"lower_hz must be non-negative, got {self.lower_hz}"
            )
        if self.upper_hz < self.lower_hz:
            raise InvalidParameter(
                f"upper_hz ({self.upper_hz}) must be >= lower_hz ({self.lower_hz})"
            )
        if not 0.0 <= self.attenuation <= 1.0:
            raise InvalidParameter(
                f"attenuation must be in [0, 1], got {self.attenuation}"
            )

    @property
    def frequency_bin_count(self) -> int:
        """Number of non-redundant bins of a real-input spectrum."""
        return self.fft_size // 2

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None) -> ProcessingParams:
        """Build parameters from camelCase message options.

        Unknown keys raise InvalidParameter. ``None`` values keep the default.
        """
        if not options:
            return cls()
        if not isinstance(options, Mapping):
            raise InvalidParameter(
                f"options must be a mapping, got {type(options).__name__}"
            )
        unknown = sorted(set(options) - set(_OPTION_FIELDS))
        if unknown:
            raise InvalidParameter(
                f"Unknown option(s) {unknown}, valid names: {list(_OPTION_FIELDS)}"
            )
        kwargs = {_OPTION_FIELDS[k]: v for k, v in options.items() if v is not None}
        return cls(**kwargs)
