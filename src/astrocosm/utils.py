"""
astrocosm.utils — Foundational Utilities
==========================================

Physical constants, angle bounding, vector math and scalar-first unit
quaternions ``q = [w, x, y, z]``.  All functions are pure NumPy.
"""

import numpy as np
from numpy.typing import NDArray

# ── Physical Constants ──────────────────────────────────────────────────────
GM_SSB = 1.32712440018e20           # Solar-system barycenter GM       [km³/s²]
WGS84_SEMI_MAJOR = 6378.1370        # WGS-84 semi-major axis           [km]
WGS84_FLATTENING = 1.0 / 298.257223563
OMEGA_EARTH = 7.2921150e-5          # Earth rotation rate              [rad/s]

DAILY_SECONDS = 86400.0
SSB_NUMBER = 0
EARTH_BARYCENTER_NAME = "Earth Barycenter"


# ── Angle Bounding ──────────────────────────────────────────────────────────

def between_0_360(angle: float) -> float:
    """Bound an angle [deg] to [0, 360)."""
    bounded = angle
    while bounded >= 360.0:
        bounded -= 360.0
    while bounded < 0.0:
        bounded += 360.0
    return bounded


def between_pm_180(angle: float) -> float:
    """Bound an angle [deg] to (-180, 180]."""
    bounded = angle
    while bounded > 180.0:
        bounded -= 360.0
    while bounded <= -180.0:
        bounded += 360.0
    return bounded


# ── Vector Helpers ──────────────────────────────────────────────────────────

def normalize(v: NDArray) -> NDArray:
    """Return unit vector.  Works on single vectors or (N,k) arrays."""
    v = np.asarray(v, dtype=np.float64)
    if v.ndim == 1:
        mag = np.linalg.norm(v)
        if mag < 1e-15:
            raise ValueError("Cannot normalize a near-zero vector.")
        return v / mag
    elif v.ndim == 2:
        mag = np.linalg.norm(v, axis=1, keepdims=True)
        if np.any(mag < 1e-15):
            raise ValueError("Cannot normalize a near-zero vector.")
        return v / mag
    else:
        raise ValueError(f"Expected 1-D or 2-D array, got {v.ndim}-D.")


# ── Quaternions ─────────────────────────────────────────────────────────────
#
#  Convention: scalar-first, q = [w, x, y, z], rotating a child-frame
#  vector into its parent:   v_parent = q ⊗ v_child ⊗ q*
# ════════════════════════════════════════════════════════════════════════════

IDENTITY_QUATERNION = np.array([1.0, 0.0, 0.0, 0.0])


def as_quaternion(q: NDArray) -> NDArray:
    """Validate and normalize a 4-element quaternion."""
    q = np.asarray(q, dtype=np.float64)
    if q.shape != (4,):
        raise ValueError(f"Quaternion must have shape (4,), got {q.shape}")
    return normalize(q)


def quat_multiply(p: NDArray, q: NDArray) -> NDArray:
    """Hamilton product p ⊗ q (apply q first, then p)."""
    w1, x1, y1, z1 = p
    w2, x2, y2, z2 = q
    return np.array([
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
        w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
    ])


def quat_conjugate(q: NDArray) -> NDArray:
    """Conjugate (inverse, for a unit quaternion)."""
    q = np.asarray(q, dtype=np.float64)
    return np.array([q[0], -q[1], -q[2], -q[3]])


def quat_from_axis_angle(axis: NDArray, angle: float) -> NDArray:
    """Unit quaternion for a right-hand rotation of ``angle`` [rad] about ``axis``."""
    k = normalize(np.asarray(axis, dtype=np.float64))
    half = 0.5 * angle
    return np.concatenate(([np.cos(half)], np.sin(half) * k))


def quat_to_dcm(q: NDArray) -> NDArray:
    """3×3 rotation matrix R such that ``R @ v == q ⊗ v ⊗ q*``."""
    w, x, y, z = as_quaternion(q)
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
        [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
        [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
    ])


def quat_rotate(q: NDArray, vec: NDArray) -> NDArray:
    """Rotate a (3,) vector by unit quaternion q (Rodrigues form)."""
    v = np.asarray(vec, dtype=np.float64)
    q = np.asarray(q, dtype=np.float64)
    w, q_vec = q[0], q[1:4]
    t = 2.0 * np.cross(q_vec, v)
    return v + w * t + np.cross(q_vec, t)


def quat_slerp(q0: NDArray, q1: NDArray, fraction: float) -> NDArray:
    """Spherical linear interpolation from q0 (fraction=0) to q1 (fraction=1)."""
    q0 = as_quaternion(q0)
    q1 = as_quaternion(q1)
    dot = float(np.dot(q0, q1))
    # Take the short arc
    if dot < 0.0:
        q1 = -q1
        dot = -dot
    if dot > 0.9995:
        return normalize(q0 + fraction * (q1 - q0))
    theta = np.arccos(dot)
    sin_theta = np.sin(theta)
    return (np.sin((1.0 - fraction) * theta) * q0
            + np.sin(fraction * theta) * q1) / sin_theta
