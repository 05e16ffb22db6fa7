"""
astrocosm.state — Frame-Tagged States & Geodetic Conversions
==============================================================

A :class:`State` is a position [km] / velocity [km/s] / acceleration
[km/s²] value expressed in a frame.  The gravitational parameter of that
frame is captured once at construction.

Geodetic Conversions (geoid frames)
-----------------------------------
With flattening f, semi-major radius a and geodetic latitude φ::

    e² = 2f − f²
    C  = a / √(1 − e² sin²φ)                 (prime-vertical radius)
    S  = a (1 − f)² / √(1 − e² sin²φ)

    r  = [(C + h) cosφ cosλ,  (C + h) cosφ sinλ,  (S + h) sinφ]
    v  = [0, 0, ω] × r

The inverse solves φ by fixed-point iteration (Vallado, 4th Ed.,
Algorithm 12)::

    φ ← atan2(z + C(φ) e² sinφ,  √(x² + y²))

Reference: G. Xu and Y. Xu, "GPS", DOI 10.1007/978-3-662-50367-6_2, 2016.
"""

import logging
import math
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from .config import DEFAULT_CONFIG, CosmConfig
from .frames import CelestialFrame, Frame, GeoidFrame
from .utils import between_0_360, between_pm_180

logger = logging.getLogger(__name__)


def _require_geoid(frame) -> GeoidFrame:
    if not isinstance(frame, GeoidFrame):
        raise TypeError(
            f"geodetic conversions need a GeoidFrame, got {type(frame).__name__}"
        )
    return frame


@dataclass(frozen=True)
class State:
    x: float
    y: float
    z: float
    vx: float
    vy: float
    vz: float
    frame: Frame
    ax: float = 0.0
    ay: float = 0.0
    az: float = 0.0
    gm: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "gm", self.frame.gm())

    # ── Constructors ──

    @classmethod
    def from_position_velocity(cls, x: float, y: float, z: float,
                               vx: float, vy: float, vz: float,
                               frame: Frame) -> "State":
        return cls(float(x), float(y), float(z),
                   float(vx), float(vy), float(vz), frame)

    @classmethod
    def from_position(cls, x: float, y: float, z: float, frame: Frame) -> "State":
        """State at rest at the given position."""
        return cls.from_position_velocity(x, y, z, 0.0, 0.0, 0.0, frame)

    @classmethod
    def from_geodesic(cls, latitude: float, longitude: float, height: float,
                      frame: GeoidFrame) -> "State":
        """Fixed point on the rotating body at geodetic latitude/longitude
        [deg] and height [km] above the ellipsoid.

        The velocity is the co-rotation velocity ``ω × r`` of that point.
        """
        frame = _require_geoid(frame)
        f = frame.flattening
        a = frame.semi_major_radius
        e2 = frame.geoid.eccentricity_squared
        sin_lat, cos_lat = math.sin(math.radians(latitude)), math.cos(math.radians(latitude))
        sin_lon, cos_lon = math.sin(math.radians(longitude)), math.cos(math.radians(longitude))

        denom = math.sqrt(1.0 - e2 * sin_lat ** 2)
        c_body = a / denom
        s_body = a * (1.0 - f) ** 2 / denom

        radius = np.array([
            (c_body + height) * cos_lat * cos_lon,
            (c_body + height) * cos_lat * sin_lon,
            (s_body + height) * sin_lat,
        ])
        velocity = np.cross(np.array([0.0, 0.0, frame.rotation_rate]), radius)
        return cls.from_position_velocity(*radius, *velocity, frame)

    # ── Vectors & magnitudes ──

    def radius(self) -> NDArray:
        return np.array([self.x, self.y, self.z])

    def velocity(self) -> NDArray:
        return np.array([self.vx, self.vy, self.vz])

    def acceleration(self) -> NDArray:
        return np.array([self.ax, self.ay, self.az])

    def rmag(self) -> float:
        """Magnitude of the radius vector [km]."""
        return math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)

    def vmag(self) -> float:
        """Magnitude of the velocity vector [km/s]."""
        return math.sqrt(self.vx ** 2 + self.vy ** 2 + self.vz ** 2)

    def energy(self) -> float:
        """Specific orbital energy (vis-viva) [km²/s²].  Celestial frames only."""
        if not isinstance(self.frame, CelestialFrame):
            raise TypeError(
                f"orbital energy needs a CelestialFrame, got {type(self.frame).__name__}"
            )
        return self.vmag() ** 2 / 2.0 - self.gm / self.rmag()

    # ── Body-fixed components ──

    def ri(self) -> float:
        return self.x

    def rj(self) -> float:
        return self.y

    def rk(self) -> float:
        return self.z

    # ── Geodetic ──

    def geodetic_longitude(self) -> float:
        """Geodetic longitude λ [deg] in [0, 360)."""
        _require_geoid(self.frame)
        return between_0_360(math.degrees(math.atan2(self.y, self.x)))

    def _geodetic_latitude_rad(self, config: CosmConfig) -> float:
        frame = _require_geoid(self.frame)
        a = frame.semi_major_radius
        e2 = frame.geoid.eccentricity_squared
        rmag = self.rmag()
        if rmag == 0.0:
            # undefined at the body centre
            return math.nan
        r_delta = math.hypot(self.x, self.y)
        latitude = math.asin(self.z / rmag)

        for _ in range(config.latitude_max_iterations):
            sin_lat = math.sin(latitude)
            c_body = a / math.sqrt(1.0 - e2 * sin_lat ** 2)
            new_latitude = math.atan2(self.z + c_body * e2 * sin_lat, r_delta)
            error = abs(latitude - new_latitude)
            if error < config.latitude_tolerance:
                return new_latitude
            latitude = new_latitude

        logger.warning(
            "geodetic latitude failed to converge after %d iterations -- error = %g",
            config.latitude_max_iterations, error,
        )
        return latitude

    def geodetic_latitude(self, config: CosmConfig = DEFAULT_CONFIG) -> float:
        """Geodetic latitude φ [deg] in (-180, 180].

        NaN at the body centre, where latitude is undefined.
        """
        return between_pm_180(math.degrees(self._geodetic_latitude_rad(config)))

    def geodetic_height(self, config: CosmConfig = DEFAULT_CONFIG) -> float:
        """Height above the ellipsoid [km]; NaN at the body centre."""
        frame = _require_geoid(self.frame)
        a = frame.semi_major_radius
        f = frame.flattening
        e2 = frame.geoid.eccentricity_squared
        latitude = self._geodetic_latitude_rad(config)
        if math.isnan(latitude):
            return math.nan
        sin_lat = math.sin(latitude)
        denom = math.sqrt(1.0 - e2 * sin_lat ** 2)

        if abs(abs(latitude) - math.pi / 2) < config.pole_threshold:
            # cos φ → 0 near the poles; use the polar-axis formulation
            s_body = a * (1.0 - f) ** 2 / denom
            return self.z / sin_lat - s_body
        c_body = a / denom
        return math.hypot(self.x, self.y) / math.cos(latitude) - c_body
