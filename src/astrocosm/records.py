"""
astrocosm.records — Decoded Ephemeris & Frame Records
=======================================================

The typed records an external decoder hands to :class:`~astrocosm.cosm.Cosm`.
They carry data only; all behaviour lives in the registry and the
interpolation engine.

Coefficient layout of a fixed-window interpolator::

    position[window] = (x_coeffs, y_coeffs, z_coeffs)   each of length ``degree``
"""

from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np

from .rotation import ConstantRotation, RotationStrategy


@dataclass(frozen=True)
class Identifier:
    """Composite (number, name) key.  Equality is exact on both fields."""
    number: int
    name: str

    def __str__(self) -> str:
        return f"{self.name} (#{self.number})"


@dataclass(frozen=True, eq=False)
class FixedWindow:
    """Windows of equal ``window_duration`` [days] with per-axis coefficients [km]."""
    window_duration: float
    position: tuple

    def __post_init__(self):
        if self.window_duration <= 0.0:
            raise ValueError("window duration must be strictly positive")
        windows = tuple(
            tuple(np.asarray(axis, dtype=np.float64) for axis in window)
            for window in self.position
        )
        for i, window in enumerate(windows):
            if len(window) != 3:
                raise ValueError(f"window {i} must hold x, y and z coefficients")
        object.__setattr__(self, "position", windows)

    @property
    def num_windows(self) -> int:
        return len(self.position)


@dataclass(frozen=True)
class VariableWindow:
    """Windows of differing duration.  Recognised but not evaluable."""
    window_durations: tuple = ()
    position: tuple = ()


StateData = Union[FixedWindow, VariableWindow]


@dataclass(frozen=True)
class Interpolator:
    start_epoch: float
    degree: int
    state_data: StateData


@dataclass(frozen=True)
class EphemerisRecord:
    identifier: Identifier
    parameters: dict = field(default_factory=dict)
    interpolator: Optional[Interpolator] = None
    ref_frame: Optional[Identifier] = None

    def parameter(self, name: str) -> Optional[float]:
        return self.parameters.get(name)


@dataclass(frozen=True)
class FrameRecord:
    identifier: Identifier
    parent: Optional[Identifier] = None
    rotation: RotationStrategy = field(default_factory=ConstantRotation)
    ephemeris: Optional[Identifier] = None
