"""
astrocosm.interpolation — Chebyshev Interpolation Engine
==========================================================

Turns stored Chebyshev coefficients plus a query epoch into position and
velocity.  Pure functions: no state, no I/O, safe to call concurrently.

Window Selection
----------------
::

    delta        = epoch − start_epoch
    window_index = ⌈delta / D − ½⌉           (nearest, halves down; "floor" is configurable)
    offset       = delta − window_index · D
    t            = 2 · offset / D − 1

Basis & Derivative Recurrences
------------------------------
::

    T₀ = 1,  T₁ = t,  Tₖ = 2t·Tₖ₋₁ − Tₖ₋₂
    T'₀ = 0, T'₁ = 1, T'ₖ = 2t·T'ₖ₋₁ − T'ₖ₋₂ + 2·Tₖ₋₁      (k ≥ 2)

Position is ``Σ Tₖ cₖ`` per axis.  Velocity is ``(2/D) · Σ T'ₖ cₖ``, the
chain-rule factor ``dt/d(epoch) = 2/D`` taking the derivative from
normalized time to days; the result is then divided by the number of
seconds per day so that coefficients in km yield km/s.
"""

import logging
import math

import numpy as np
from numpy.typing import NDArray

from .config import DEFAULT_CONFIG, CosmConfig
from .errors import InvalidDegree, UnsupportedInterpolation, WindowOutOfRange
from .records import FixedWindow, Interpolator, VariableWindow

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════════════════
#  Chebyshev Basis
# ════════════════════════════════════════════════════════════════════════════

def _check_degree(degree: int) -> None:
    if degree < 2:
        raise InvalidDegree(degree)


def chebyshev_basis(t: float, degree: int) -> NDArray:
    """Chebyshev polynomials T₀(t) … T_{degree−1}(t).

    Parameters
    ----------
    t : float — normalized time
    degree : int — number of basis values (coefficients per window), ≥ 2

    Returns
    -------
    T : (degree,) ndarray
    """
    _check_degree(degree)
    T = np.empty(degree, dtype=np.float64)
    T[0] = 1.0
    T[1] = t
    for k in range(2, degree):
        T[k] = 2.0 * t * T[k - 1] - T[k - 2]
    return T


def chebyshev_derivatives(t: float, degree: int,
                          basis: NDArray | None = None) -> NDArray:
    """Derivatives dTₖ/dt of the Chebyshev basis at ``t``.

    ``basis`` may be passed in to avoid recomputing ``chebyshev_basis``.
    """
    _check_degree(degree)
    T = chebyshev_basis(t, degree) if basis is None else basis
    dT = np.empty(degree, dtype=np.float64)
    dT[0] = 0.0
    dT[1] = 1.0
    for k in range(2, degree):
        dT[k] = 2.0 * t * dT[k - 1] - dT[k - 2] + 2.0 * T[k - 1]
    return dT


# ════════════════════════════════════════════════════════════════════════════
#  Window Selection
# ════════════════════════════════════════════════════════════════════════════

def select_window(start_epoch: float, window_duration: float,
                  num_windows: int, epoch: float,
                  rounding: str = "nearest") -> tuple[int, float]:
    """Pick the coefficient window for ``epoch``.

    Returns
    -------
    (window_index, offset) : window index and offset [days] into it

    Raises
    ------
    WindowOutOfRange if the index is negative or ≥ ``num_windows``.
    """
    delta = epoch - start_epoch
    if rounding == "nearest":
        # a query halfway between windows belongs to the earlier one
        window_index = int(math.ceil(delta / window_duration - 0.5))
    elif rounding == "floor":
        window_index = int(math.floor(delta / window_duration))
    else:
        raise ValueError(f"Unknown window rounding '{rounding}'")

    offset = delta - window_index * window_duration
    if window_index < 0 or window_index >= num_windows:
        raise WindowOutOfRange(window_index, num_windows, epoch)
    return window_index, offset


def normalized_time(offset: float, window_duration: float) -> float:
    """Map an in-window offset [days] to Chebyshev time t = 2·offset/D − 1."""
    return 2.0 * offset / window_duration - 1.0


# ════════════════════════════════════════════════════════════════════════════
#  Evaluation
# ════════════════════════════════════════════════════════════════════════════

def evaluate_window(coefficients, t: float, window_duration: float,
                    degree: int,
                    seconds_per_day: float = DEFAULT_CONFIG.seconds_per_day,
                    ) -> tuple[NDArray, NDArray]:
    """Evaluate one window's (x, y, z) coefficient arrays at normalized time t.

    Returns
    -------
    position : (3,) ndarray [km]
    velocity : (3,) ndarray [km/s]
    """
    T = chebyshev_basis(t, degree)
    dT = chebyshev_derivatives(t, degree, basis=T)

    C = np.empty((3, degree), dtype=np.float64)
    for axis, coeffs in enumerate(coefficients):
        coeffs = np.asarray(coeffs, dtype=np.float64)
        if coeffs.shape[0] < degree:
            raise InvalidDegree(
                degree, f"window holds only {coeffs.shape[0]} coefficients per axis"
            )
        C[axis] = coeffs[:degree]

    position = C @ T
    velocity = (2.0 / window_duration) * (C @ dT) / seconds_per_day
    return position, velocity


def interpolate(interpolator: Interpolator, epoch: float,
                config: CosmConfig = DEFAULT_CONFIG,
                identifier=None) -> tuple[NDArray, NDArray]:
    """Position [km] and velocity [km/s] from an interpolator at ``epoch`` [days].

    Raises
    ------
    UnsupportedInterpolation — variable-window state data
    InvalidDegree — degree < 2 or short coefficient arrays
    WindowOutOfRange — epoch outside the stored windows
    """
    data = interpolator.state_data
    if isinstance(data, VariableWindow):
        raise UnsupportedInterpolation(identifier, "VariableWindow")
    if not isinstance(data, FixedWindow):
        raise UnsupportedInterpolation(identifier, type(data).__name__)
    _check_degree(interpolator.degree)

    D = data.window_duration
    window_index, offset = select_window(
        interpolator.start_epoch, D, data.num_windows, epoch,
        rounding=config.window_rounding,
    )
    t = normalized_time(offset, D)
    logger.debug("epoch %s -> window %d, offset %s, t=%s",
                 epoch, window_index, offset, t)
    return evaluate_window(data.position[window_index], t, D,
                           interpolator.degree, config.seconds_per_day)
