"""
astrocosm.frames — Frame Variants, Geoids & the Frame Arena
=============================================================

Frame Variants
--------------
A frame is one of a closed set of value types, each exposing ``gm()``:

**CelestialFrame** — inertial frame centred on a body; ``gm`` is that
body's gravitational parameter.

**FreeFrame** — free-floating, body-relative frame (e.g. a spacecraft);
``gm = 0``.

**GeoidFrame** — body-fixed frame of an ellipsoidal body; carries the
flattening, semi-major radius and rotation rate needed for geodesy and
delegates ``gm`` to its geoid.

Frame Arena
-----------
Frames are stored in a :class:`FrameGraph` and addressed by small integer
handles.  A frame's parent is a handle, or ``ROOT`` for the top of a tree,
so the hierarchy is a forest::

    SSB J2000 (ROOT)
    └── EME2000
        └── IAU Earth

Rotation to an ancestor is the quaternion product, in ancestor-to-
descendant order, of each link's ``rotation_to_parent``::

    q_{A←C}(t) = q_{A←B}(t) ⊗ q_{B←C}(t)

and any two frames of one tree are related through their lowest common
ancestor::

    q_{dst←src} = q*_{anc←dst} ⊗ q_{anc←src}
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray

from .errors import FrameTransformError, LoadError, ObjectNotFound
from .records import FrameRecord, Identifier
from .rotation import RotationStrategy
from .utils import (
    DAILY_SECONDS, IDENTITY_QUATERNION,
    quat_conjugate, quat_multiply, quat_to_dcm,
)

logger = logging.getLogger(__name__)

ROOT = -1

# Step [days] of the difference used for the rotation rate
_RATE_STEP_DAYS = 1e-5


# ════════════════════════════════════════════════════════════════════════════
#  Geoid
# ════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Geoid:
    """Ellipsoidal model of a rotating body.

    gm [km³/s²], radii [km], rotation_rate [rad/s].
    """
    identifier: Identifier
    gm: float
    flattening: float
    equatorial_radius: float
    semi_major_radius: float
    rotation_rate: float = 0.0

    @classmethod
    def perfect_sphere(cls, identifier: Identifier, gm: float) -> "Geoid":
        return cls(identifier, gm, flattening=0.0,
                   equatorial_radius=0.0, semi_major_radius=0.0)

    @property
    def eccentricity_squared(self) -> float:
        """First eccentricity squared, e² = 2f − f²."""
        return 2.0 * self.flattening - self.flattening ** 2


# ════════════════════════════════════════════════════════════════════════════
#  Frame Variants
# ════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CelestialFrame:
    identifier: Identifier
    body_gm: float = 0.0
    handle: Optional[int] = None

    def gm(self) -> float:
        return self.body_gm


@dataclass(frozen=True)
class FreeFrame:
    identifier: Identifier
    handle: Optional[int] = None

    def gm(self) -> float:
        return 0.0


@dataclass(frozen=True)
class GeoidFrame:
    geoid: Geoid
    handle: Optional[int] = None

    @property
    def identifier(self) -> Identifier:
        return self.geoid.identifier

    @property
    def flattening(self) -> float:
        return self.geoid.flattening

    @property
    def semi_major_radius(self) -> float:
        return self.geoid.semi_major_radius

    @property
    def equatorial_radius(self) -> float:
        return self.geoid.equatorial_radius

    @property
    def rotation_rate(self) -> float:
        return self.geoid.rotation_rate

    def gm(self) -> float:
        return self.geoid.gm


Frame = Union[CelestialFrame, FreeFrame, GeoidFrame]


# ════════════════════════════════════════════════════════════════════════════
#  Frame Arena
# ════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FrameNode:
    identifier: Identifier
    parent: int
    rotation: RotationStrategy
    ephemeris: Optional[Identifier] = None


class FrameGraph:
    """Arena of frames addressed by integer handles.  Immutable once built."""

    def __init__(self, nodes: list[FrameNode], handles: dict[Identifier, int]):
        self._nodes = tuple(nodes)
        self._handles = dict(handles)

    @classmethod
    def from_records(cls, records) -> "FrameGraph":
        """Build the arena, resolving parent identifiers to handles.

        Raises
        ------
        LoadError — unknown parent identifier or a parent cycle
        """
        handles: dict[Identifier, int] = {}
        latest: list[FrameRecord] = []
        for record in records:
            if record.identifier in handles:
                logger.warning("Duplicate frame %s, keeping the last record",
                               record.identifier)
                latest[handles[record.identifier]] = record
            else:
                handles[record.identifier] = len(latest)
                latest.append(record)

        nodes = []
        for record in latest:
            if record.parent is None:
                parent = ROOT
            elif record.parent in handles:
                parent = handles[record.parent]
            else:
                raise LoadError(
                    f"frame {record.identifier} references unknown parent {record.parent}"
                )
            nodes.append(FrameNode(record.identifier, parent,
                                   record.rotation, record.ephemeris))

        graph = cls(nodes, handles)
        graph._check_acyclic()
        return graph

    def _check_acyclic(self) -> None:
        # 0 = unvisited, 1 = on current path, 2 = known to reach ROOT
        state = [0] * len(self._nodes)
        for start in range(len(self._nodes)):
            path = []
            h = start
            while h != ROOT and state[h] != 2:
                if state[h] == 1:
                    raise LoadError(
                        f"frame {self._nodes[h].identifier} is its own ancestor"
                    )
                state[h] = 1
                path.append(h)
                h = self._nodes[h].parent
            for p in path:
                state[p] = 2

    # ── Lookup ──

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, identifier: Identifier) -> bool:
        return identifier in self._handles

    def identifiers(self) -> list[Identifier]:
        return [n.identifier for n in self._nodes]

    def handle(self, identifier: Identifier) -> int:
        try:
            return self._handles[identifier]
        except KeyError:
            raise ObjectNotFound(identifier, "frame") from None

    def node(self, handle: int) -> FrameNode:
        return self._nodes[handle]

    # ── Hierarchy ──

    def parent(self, handle: int) -> Optional[int]:
        p = self._nodes[handle].parent
        return None if p == ROOT else p

    def ancestry(self, handle: int) -> list[int]:
        """Handles from ``handle`` (inclusive) up to its root."""
        chain = []
        h = handle
        while h != ROOT:
            chain.append(h)
            h = self._nodes[h].parent
        return chain

    def origin(self, handle: int) -> Optional[Identifier]:
        """Ephemeris identifier of the body a frame is centred on.

        Frames without an ephemeris link share their parent's origin.
        """
        for h in self.ancestry(handle):
            if self._nodes[h].ephemeris is not None:
                return self._nodes[h].ephemeris
        return None

    def common_ancestor(self, a: int, b: int) -> int:
        ancestors_a = set(self.ancestry(a))
        for h in self.ancestry(b):
            if h in ancestors_a:
                return h
        raise FrameTransformError(
            f"frames {self._nodes[a].identifier} and {self._nodes[b].identifier} "
            f"do not share a common ancestor"
        )

    # ── Rotations ──

    def rotation_to_parent(self, handle: int, epoch: float) -> NDArray:
        return self._nodes[handle].rotation.rotation_at(epoch)

    def rotation_to_ancestor(self, handle: int, ancestor: int,
                             epoch: float) -> NDArray:
        """Quaternion q with v_ancestor = q ⊗ v ⊗ q*."""
        q = IDENTITY_QUATERNION.copy()
        h = handle
        while h != ancestor:
            if h == ROOT:
                raise FrameTransformError(
                    f"{self._nodes[ancestor].identifier} is not an ancestor of "
                    f"{self._nodes[handle].identifier}"
                )
            q = quat_multiply(self.rotation_to_parent(h, epoch), q)
            h = self._nodes[h].parent
        return q

    def rotation_between(self, src: int, dst: int, epoch: float) -> NDArray:
        """Quaternion q with v_dst = q ⊗ v_src ⊗ q*."""
        anc = self.common_ancestor(src, dst)
        q_src = self.rotation_to_ancestor(src, anc, epoch)
        q_dst = self.rotation_to_ancestor(dst, anc, epoch)
        return quat_multiply(quat_conjugate(q_dst), q_src)

    def _chain(self, src: int, dst: int) -> list[int]:
        """Handles of every link between ``src``/``dst`` and their common ancestor."""
        anc = self.common_ancestor(src, dst)
        links = []
        for start in (src, dst):
            h = start
            while h != anc:
                links.append(h)
                h = self._nodes[h].parent
        return links

    def _chain_is_constant(self, src: int, dst: int) -> bool:
        return all(self._nodes[h].rotation.is_constant() for h in self._chain(src, dst))

    def valid_range(self, src: int, dst: int) -> tuple[float, float]:
        """Epochs [days] at which every rotation between two frames is defined."""
        lo, hi = -math.inf, math.inf
        for h in self._chain(src, dst):
            start, end = self._nodes[h].rotation.valid_range()
            lo, hi = max(lo, start), min(hi, end)
        return lo, hi

    def transform_state(self, src: int, dst: int, epoch: float,
                        position: NDArray, velocity: NDArray,
                        seconds_per_day: float = DAILY_SECONDS,
                        ) -> tuple[NDArray, NDArray]:
        """Rotate a state from ``src`` into ``dst`` (same origin assumed).

        Applies the transport theorem for time-varying rotations::

            r_dst = R · r_src
            v_dst = R · v_src + Ṙ · r_src

        with Ṙ from a difference of R in epoch [per second], central inside
        the rotations' valid range and one-sided at its ends.

        Raises
        ------
        FrameTransformError if ``epoch`` lies outside that range.
        """
        lo, hi = self.valid_range(src, dst)
        if not lo <= epoch <= hi:
            raise FrameTransformError(
                f"epoch {epoch} outside the rotation range [{lo}, {hi}] between "
                f"{self._nodes[src].identifier} and {self._nodes[dst].identifier}"
            )
        r = np.asarray(position, dtype=np.float64)
        v = np.asarray(velocity, dtype=np.float64)
        R = quat_to_dcm(self.rotation_between(src, dst, epoch))
        r_dst = R @ r
        v_dst = R @ v
        if not self._chain_is_constant(src, dst):
            e_plus = min(epoch + _RATE_STEP_DAYS, hi)
            e_minus = max(epoch - _RATE_STEP_DAYS, lo)
            if e_plus > e_minus:
                R_plus = quat_to_dcm(self.rotation_between(src, dst, e_plus))
                R_minus = quat_to_dcm(self.rotation_between(src, dst, e_minus))
                R_dot = (R_plus - R_minus) / ((e_plus - e_minus) * seconds_per_day)
                v_dst = v_dst + R_dot @ r
        return r_dst, v_dst
