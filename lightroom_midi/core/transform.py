"""Linear rescaling of controller values into Lightroom parameter ranges."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ScaleRange:
    lr_min: float
    lr_max: float
    midi_min: float = 0
    midi_max: float = 127


def scale_value(value: float, scale: ScaleRange) -> float:
    """Map ``value`` from the MIDI range onto the Lightroom range.

    Values outside ``[midi_min, midi_max]`` are not clamped and land outside
    ``[lr_min, lr_max]``; Lightroom decides what to do with them.
    """

    normalized = (value - scale.midi_min) / (scale.midi_max - scale.midi_min)
    # Interpolation form keeps both endpoints exact.
    return scale.lr_min * (1 - normalized) + scale.lr_max * normalized
