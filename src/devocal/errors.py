"""Error kinds raised by devocal.

Every error carries a short ``kind`` string that the message boundary in
:mod:`devocal.worker` uses when reporting a failure.
"""

from __future__ import annotations


class DevocalError(Exception):
    """Base class for all devocal errors."""

    kind = "DevocalError"


class InvalidParameter(DevocalError, ValueError):
    """Bad window size, sample rate, band bounds or attenuation factor."""

    kind = "InvalidParameter"


class InvalidInput(DevocalError, ValueError):
    """Missing, malformed, or mismatched channel buffers."""

    kind = "InvalidInput"


class NumericFailure(DevocalError, ArithmeticError):
    """NaN or Inf produced while processing."""

    kind = "NumericFailure"


class ProcessingCancelled(DevocalError):
    """Processing was stopped between frames by a cancel request."""

    kind = "ProcessingCancelled"


class ShortInputWarning(UserWarning):
    """Input shorter than one analysis frame; output is silent."""
