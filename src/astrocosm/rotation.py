"""
astrocosm.rotation — Time-Dependent Frame Rotations
=====================================================

A frame's orientation relative to its parent is a *strategy* selected at
construction time.  Every strategy answers a single question through
``rotation_at(epoch)``: the scalar-first unit quaternion ``q`` such that
``v_parent = q ⊗ v_child ⊗ q*`` at that epoch [days].

Strategies
----------
**ConstantRotation** — fixed orientation (inertial frames).

**AngularVelocityRotation** — constant spin about a fixed axis from a
reference epoch (body-fixed frames such as ECEF)::

    q(t) = q_spin(ω · (t − t₀) · 86400) ⊗ q₀

**InterpolatedRotation** — slerp between time-tagged attitude samples.

**PiecewiseRotation** — hands off between strategies at given epochs,
e.g. an instrument that slews for some minutes and then holds.
"""

import math
from bisect import bisect_right
from dataclasses import dataclass, field

from numpy.typing import NDArray

from .utils import (
    DAILY_SECONDS, IDENTITY_QUATERNION,
    as_quaternion, normalize, quat_multiply, quat_from_axis_angle, quat_slerp,
)


class RotationStrategy:
    """Interface shared by every rotation strategy."""

    def rotation_at(self, epoch: float) -> NDArray:
        raise NotImplementedError

    def valid_range(self) -> tuple[float, float]:
        """Epochs [days] over which ``rotation_at`` is defined."""
        return -math.inf, math.inf

    def is_constant(self) -> bool:
        return False


@dataclass(frozen=True, eq=False)
class ConstantRotation(RotationStrategy):
    quaternion: NDArray = field(default_factory=lambda: IDENTITY_QUATERNION.copy())

    def __post_init__(self):
        object.__setattr__(self, "quaternion", as_quaternion(self.quaternion))

    def rotation_at(self, epoch: float) -> NDArray:
        return self.quaternion.copy()

    def is_constant(self) -> bool:
        return True


@dataclass(frozen=True, eq=False)
class AngularVelocityRotation(RotationStrategy):
    """Constant spin ``rate`` [rad/s] about ``axis`` starting at ``quaternion``
    at ``reference_epoch`` [days]."""
    quaternion: NDArray
    axis: NDArray
    rate: float
    reference_epoch: float
    seconds_per_day: float = DAILY_SECONDS

    def __post_init__(self):
        object.__setattr__(self, "quaternion", as_quaternion(self.quaternion))
        object.__setattr__(self, "axis", normalize(self.axis))

    def rotation_at(self, epoch: float) -> NDArray:
        angle = self.rate * (epoch - self.reference_epoch) * self.seconds_per_day
        return quat_multiply(quat_from_axis_angle(self.axis, angle), self.quaternion)

    def is_constant(self) -> bool:
        return self.rate == 0.0


@dataclass(frozen=True, eq=False)
class InterpolatedRotation(RotationStrategy):
    """Slerp between samples ``quaternions[i]`` taken at ``epochs[i]``."""
    epochs: tuple
    quaternions: tuple

    def __post_init__(self):
        epochs = tuple(float(e) for e in self.epochs)
        quats = tuple(as_quaternion(q) for q in self.quaternions)
        if len(epochs) == 0 or len(epochs) != len(quats):
            raise ValueError("epochs and quaternions must be non-empty and of equal length")
        if any(b <= a for a, b in zip(epochs, epochs[1:])):
            raise ValueError("rotation sample epochs must be strictly increasing")
        object.__setattr__(self, "epochs", epochs)
        object.__setattr__(self, "quaternions", quats)

    def rotation_at(self, epoch: float) -> NDArray:
        if epoch < self.epochs[0] or epoch > self.epochs[-1]:
            raise ValueError(
                f"epoch {epoch} outside rotation samples "
                f"[{self.epochs[0]}, {self.epochs[-1]}]"
            )
        i = bisect_right(self.epochs, epoch) - 1
        if i >= len(self.epochs) - 1:
            return self.quaternions[-1].copy()
        e0, e1 = self.epochs[i], self.epochs[i + 1]
        return quat_slerp(self.quaternions[i], self.quaternions[i + 1],
                          (epoch - e0) / (e1 - e0))

    def valid_range(self) -> tuple[float, float]:
        return self.epochs[0], self.epochs[-1]


@dataclass(frozen=True, eq=False)
class PiecewiseRotation(RotationStrategy):
    """Sequence of ``(start_epoch, strategy)`` segments.

    The active segment is the last one whose start epoch is ≤ the query
    epoch; epochs before the first segment raise ``ValueError``.
    """
    segments: tuple

    def __post_init__(self):
        segments = tuple((float(start), strategy) for start, strategy in self.segments)
        if not segments:
            raise ValueError("at least one rotation segment is required")
        starts = [s for s, _ in segments]
        if any(b <= a for a, b in zip(starts, starts[1:])):
            raise ValueError("segment start epochs must be strictly increasing")
        object.__setattr__(self, "segments", segments)

    def rotation_at(self, epoch: float) -> NDArray:
        starts = [s for s, _ in self.segments]
        i = bisect_right(starts, epoch) - 1
        if i < 0:
            raise ValueError(f"epoch {epoch} precedes the first rotation segment")
        return self.segments[i][1].rotation_at(epoch)

    def valid_range(self) -> tuple[float, float]:
        return self.segments[0][0], self.segments[-1][1].valid_range()[1]

    def is_constant(self) -> bool:
        return len(self.segments) == 1 and self.segments[0][1].is_constant()
