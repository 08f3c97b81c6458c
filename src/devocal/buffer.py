"""AudioBuffer -- planar float32 audio with sample-rate metadata.

Thin container used at the edges of devocal: the processing core works on
plain 1D arrays, and :func:`devocal.dsp.remove_vocals` accepts and returns
AudioBuffer so callers can keep channels and sample rate together.
"""

from __future__ import annotations

import numpy as np

from devocal.errors import InvalidInput


class AudioBuffer:
    """A 2D ``[channels, frames]`` float32 audio buffer.

    Parameters
    ----------
    data : array-like or AudioBuffer
        Audio samples.  1D input is treated as a single channel.
    sample_rate : float
        Sample rate in Hz.
    label : str or None
        Free-form label carried as metadata.
    """

    __slots__ = ("_data", "_sample_rate", "_label")

    def __init__(
        self,
        data,
        sample_rate: float = 44100.0,
        label: str | None = None,
    ):
        if isinstance(data, AudioBuffer):
            arr = data._data.copy()
        else:
            arr = np.asarray(data, dtype=np.float32)

        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        elif arr.ndim != 2:
            raise InvalidInput(f"AudioBuffer requires 1D or 2D data, got {arr.ndim}D")

        if arr.dtype != np.float32:
            arr = arr.astype(np.float32)
        if not arr.flags["C_CONTIGUOUS"]:
            arr = np.ascontiguousarray(arr)

        self._data: np.ndarray = arr
        self._sample_rate: float = float(sample_rate)
        self._label: str | None = label

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def data(self) -> np.ndarray:
        """Raw 2D ``[channels, frames]`` float32 array."""
        return self._data

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return self._data.shape[0]

    @property
    def frames(self) -> int:
        return self._data.shape[1]

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self._data.shape[1] / self._sample_rate

    @property
    def label(self) -> str | None:
        return self._label

    @property
    def left(self) -> np.ndarray:
        """Channel 0."""
        return self.channel(0)

    @property
    def right(self) -> np.ndarray:
        """Channel 1, or channel 0 for a mono buffer."""
        return self.channel(1 if self.channels > 1 else 0)

    # ------------------------------------------------------------------
    # Channel access
    # ------------------------------------------------------------------

    def channel(self, i: int) -> np.ndarray:
        """Return a 1D numpy view of channel *i*."""
        if i < 0 or i >= self.channels:
            raise IndexError(
                f"Channel {i} out of range for {self.channels}-channel buffer"
            )
        return self._data[i]

    def __getitem__(self, i: int) -> np.ndarray:
        if not isinstance(i, int):
            raise TypeError(f"Invalid index type: {type(i)}")
        return self.channel(i)

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self._data
        return self._data.astype(dtype)

    def __len__(self) -> int:
        """Number of frames (not channels)."""
        return self.frames

    def __repr__(self) -> str:
        parts = [
            f"channels={self.channels}",
            f"frames={self.frames}",
            f"sr={self.sample_rate}",
        ]
        if self._label is not None:
            parts.append(f"label='{self._label}'")
        return f"AudioBuffer({', '.join(parts)})"

    # ------------------------------------------------------------------
    # Factory methods
    # ------------------------------------------------------------------

    @classmethod
    def from_channels(
        cls,
        left,
        right,
        sample_rate: float = 44100.0,
        **kw,
    ) -> AudioBuffer:
        """Stack separate left/right sample sequences into a stereo buffer."""
        lhs = np.asarray(left, dtype=np.float32)
        rhs = np.asarray(right, dtype=np.float32)
        if lhs.ndim != 1 or rhs.ndim != 1:
            raise InvalidInput("left and right must be 1D sequences")
        if lhs.shape[0] != rhs.shape[0]:
            raise InvalidInput(
                f"Channel length mismatch: left={lhs.shape[0]}, right={rhs.shape[0]}"
            )
        return cls(np.stack([lhs, rhs]), sample_rate=sample_rate, **kw)

    @classmethod
    def zeros(
        cls,
        channels: int,
        frames: int,
        sample_rate: float = 44100.0,
        **kw,
    ) -> AudioBuffer:
        return cls(
            np.zeros((channels, frames), dtype=np.float32),
            sample_rate=sample_rate,
            **kw,
        )

    @classmethod
    def tones(
        cls,
        freqs,
        channels: int = 2,
        frames: int = 8192,
        sample_rate: float = 44100.0,
        amplitude: float = 1.0,
        **kw,
    ) -> AudioBuffer:
        """Sum of sine tones at *freqs* (Hz), identical in every channel."""
        t = np.arange(frames, dtype=np.float64) / sample_rate
        row = np.zeros(frames, dtype=np.float64)
        for f in np.atleast_1d(freqs):
            row += amplitude * np.sin(2.0 * np.pi * float(f) * t)
        arr = np.tile(row.astype(np.float32), (channels, 1))
        return cls(arr, sample_rate=sample_rate, **kw)

    @classmethod
    def noise(
        cls,
        channels: int = 2,
        frames: int = 8192,
        sample_rate: float = 44100.0,
        seed: int | None = None,
        **kw,
    ) -> AudioBuffer:
        rng = np.random.default_rng(seed)
        arr = rng.standard_normal((channels, frames)).astype(np.float32)
        return cls(arr, sample_rate=sample_rate, **kw)

    # ------------------------------------------------------------------
    # Copy
    # ------------------------------------------------------------------

    def copy(self) -> AudioBuffer:
        """Deep copy with independent numpy storage."""
        return AudioBuffer(
            self._data.copy(),
            sample_rate=self._sample_rate,
            label=self._label,
        )
