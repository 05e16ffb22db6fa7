"""
astrocosm — Ephemeris & Reference-Frame Engine
================================================

Given a celestial-body identifier and an epoch, returns that body's
position/velocity state in a chosen reference frame by evaluating stored
Chebyshev approximations of its motion.  Built on NumPy.

Data flow::

    decoded ephemeris + frame records
        → Cosm.build   (indexing, frame arena, geoid derivation)
        → Cosm.state(body, epoch, frame)
        → Chebyshev evaluation
        → State in the target frame
        → rmag / vmag / energy / geodetic latitude, longitude, height

Units
-----
  - Epochs: days (Julian / Modified Julian, matching the coefficient store)
  - Positions: km;  velocities: km/s;  GM: km³/s²
  - Angles: degrees at the State API, radians internally

Frames
------
**CelestialFrame** — inertial, gm from its body.
**FreeFrame** — body-relative, gm = 0.
**GeoidFrame** — body-fixed ellipsoid with flattening, radius and spin.

Frames form a forest addressed by integer handles; rotations between any
two frames of a tree compose through their common ancestor.
"""

from .errors import (
    CosmError, LoadError, GeoidDerivationError, QueryError,
    ObjectNotFound, NoInterpolationData, UnsupportedInterpolation,
    WindowOutOfRange, InvalidDegree, FrameTransformError,
)

from .config import CosmConfig, DEFAULT_CONFIG, load_config

from .records import (
    Identifier,
    FixedWindow, VariableWindow, Interpolator,
    EphemerisRecord, FrameRecord,
)

from .rotation import (
    RotationStrategy,
    ConstantRotation,
    AngularVelocityRotation,
    InterpolatedRotation,
    PiecewiseRotation,
)

from .interpolation import (
    chebyshev_basis,
    chebyshev_derivatives,
    select_window,
    normalized_time,
    evaluate_window,
    interpolate,
)

from .frames import (
    ROOT,
    Geoid,
    CelestialFrame, FreeFrame, GeoidFrame,
    FrameGraph,
)

from .state import State

from .cosm import Cosm, derive_geoid

from .utils import (
    between_0_360,
    between_pm_180,
    normalize,
    quat_multiply, quat_conjugate, quat_rotate, quat_to_dcm,
    quat_from_axis_angle, quat_slerp,
    IDENTITY_QUATERNION,
    GM_SSB,
    WGS84_SEMI_MAJOR,
    WGS84_FLATTENING,
    OMEGA_EARTH,
    DAILY_SECONDS,
)

__version__ = "0.1.0"
__all__ = [
    # ── Constants ──
    "GM_SSB", "WGS84_SEMI_MAJOR", "WGS84_FLATTENING", "OMEGA_EARTH",
    "DAILY_SECONDS", "IDENTITY_QUATERNION", "ROOT",
    # ── Errors ──
    "CosmError", "LoadError", "GeoidDerivationError", "QueryError",
    "ObjectNotFound", "NoInterpolationData", "UnsupportedInterpolation",
    "WindowOutOfRange", "InvalidDegree", "FrameTransformError",
    # ── Configuration ──
    "CosmConfig", "DEFAULT_CONFIG", "load_config",
    # ── Records ──
    "Identifier", "FixedWindow", "VariableWindow", "Interpolator",
    "EphemerisRecord", "FrameRecord",
    # ── Rotations ──
    "RotationStrategy", "ConstantRotation", "AngularVelocityRotation",
    "InterpolatedRotation", "PiecewiseRotation",
    # ── Interpolation ──
    "chebyshev_basis", "chebyshev_derivatives", "select_window",
    "normalized_time", "evaluate_window", "interpolate",
    # ── Frames ──
    "Geoid", "CelestialFrame", "FreeFrame", "GeoidFrame", "FrameGraph",
    # ── Registry & states ──
    "Cosm", "derive_geoid", "State",
    # ── Utilities ──
    "between_0_360", "between_pm_180", "normalize",
    "quat_multiply", "quat_conjugate", "quat_rotate", "quat_to_dcm",
    "quat_from_axis_angle", "quat_slerp",
]
