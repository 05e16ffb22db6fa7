"""
astrocosm.cosm — The Celestial Registry
=========================================

:class:`Cosm` (from the Greek for "world") indexes decoded ephemeris and
frame records by identifier, derives geoids, and answers state queries by
dispatching to the interpolation engine.

It is built once, explicitly, and is read-only afterwards, so a single
instance may be shared between threads without locking::

    cosm = Cosm.build(ephemeris_records, frame_records)
    eme2k = cosm.frame(Identifier(1, "EME2000"))
    state = cosm.state(Identifier(399, "Earth"), 2451545.0, eme2k)

Geoid Derivation
----------------
A frame record becomes a geoid when its linked ephemeris carries a ``GM``
parameter; ``Flattening`` and ``Equatorial radius`` are then required and
``Rotation rate`` [rad/s] is optional.  Two overrides apply:

- The Earth barycenter's semi-major radius is the WGS-84 value
  6378.1370 km whatever its stored equatorial radius.
- The solar-system barycenter, without an ephemeris-linked GM, is a
  perfect sphere with GM = 1.32712440018e20.
"""

import logging
import time
from typing import Optional

from .config import DEFAULT_CONFIG, CosmConfig
from .errors import (
    FrameTransformError, GeoidDerivationError, LoadError,
    NoInterpolationData, ObjectNotFound,
)
from .frames import (
    CelestialFrame, Frame, FrameGraph, FreeFrame, Geoid, GeoidFrame,
)
from .interpolation import interpolate
from .records import EphemerisRecord, Identifier
from .state import State

logger = logging.getLogger(__name__)

GM = "GM"
FLATTENING = "Flattening"
EQUATORIAL_RADIUS = "Equatorial radius"
ROTATION_RATE = "Rotation rate"


def derive_geoid(identifier: Identifier, ephemeris: EphemerisRecord,
                 config: CosmConfig = DEFAULT_CONFIG) -> Geoid:
    """Build the geoid of frame ``identifier`` from its GM-bearing ephemeris.

    Raises
    ------
    GeoidDerivationError if Flattening or Equatorial radius is missing.
    """
    gm = ephemeris.parameter(GM)
    flattening = ephemeris.parameter(FLATTENING)
    if flattening is None:
        raise GeoidDerivationError(identifier, FLATTENING)
    equatorial_radius = ephemeris.parameter(EQUATORIAL_RADIUS)
    if equatorial_radius is None:
        raise GeoidDerivationError(identifier, EQUATORIAL_RADIUS)

    names = (identifier.name, ephemeris.identifier.name)
    if config.earth_barycenter_name in names:
        semi_major_radius = config.earth_semi_major_radius
    else:
        semi_major_radius = equatorial_radius

    return Geoid(
        identifier=identifier,
        gm=gm,
        flattening=flattening,
        equatorial_radius=equatorial_radius,
        semi_major_radius=semi_major_radius,
        rotation_rate=ephemeris.parameters.get(ROTATION_RATE, 0.0),
    )


class Cosm:
    """Read-only registry of ephemerides, frames and geoids."""

    def __init__(self, ephemerides: dict, frames: FrameGraph, geoids: dict,
                 diagnostics: Optional[list] = None,
                 config: CosmConfig = DEFAULT_CONFIG):
        self._ephemerides = dict(ephemerides)
        self._frames = frames
        self._geoids = dict(geoids)
        self.diagnostics = tuple(diagnostics or ())
        self.config = config

    # ════════════════════════════════════════════════════════════════════
    #  Construction
    # ════════════════════════════════════════════════════════════════════

    @classmethod
    def build(cls, ephemerides, frames,
              config: CosmConfig = DEFAULT_CONFIG) -> "Cosm":
        """Index decoded records and derive geoids.

        Parameters
        ----------
        ephemerides : iterable of EphemerisRecord — non-empty
        frames : iterable of FrameRecord — non-empty
        config : CosmConfig

        Raises
        ------
        LoadError — empty inputs, unknown parent frame, parent cycle
        """
        build_start = time.perf_counter()
        ephemerides = list(ephemerides)
        frames = list(frames)
        if not ephemerides:
            raise LoadError("no ephemerides found")
        if not frames:
            raise LoadError("no frames found")

        ephemeris_map: dict[Identifier, EphemerisRecord] = {}
        for record in ephemerides:
            if record.identifier in ephemeris_map:
                logger.warning("Duplicate ephemeris %s, keeping the last record",
                               record.identifier)
            ephemeris_map[record.identifier] = record

        graph = FrameGraph.from_records(frames)

        geoids: dict[Identifier, Geoid] = {}
        diagnostics = []
        for handle in range(len(graph)):
            node = graph.node(handle)
            linked = ephemeris_map.get(node.ephemeris) if node.ephemeris else None
            if linked is not None and linked.parameter(GM) is not None:
                try:
                    geoids[node.identifier] = derive_geoid(node.identifier, linked, config)
                except GeoidDerivationError as e:
                    logger.warning("%s", e)
                    diagnostics.append(e)
            elif node.identifier.number == config.ssb_number:
                geoids[node.identifier] = Geoid.perfect_sphere(
                    node.identifier, config.ssb_gm)

        cosm = cls(ephemeris_map, graph, geoids, diagnostics, config)
        logger.info(
            "Loaded %d ephemerides, %d frames and %d geoids in %.3f seconds",
            len(ephemeris_map), len(graph), len(geoids),
            time.perf_counter() - build_start,
        )
        return cosm

    # ════════════════════════════════════════════════════════════════════
    #  Lookup
    # ════════════════════════════════════════════════════════════════════

    def ephemerides(self) -> list[Identifier]:
        return list(self._ephemerides)

    def frames(self) -> list[Identifier]:
        return self._frames.identifiers()

    def geoids(self) -> list[Identifier]:
        return list(self._geoids)

    def ephemeris(self, identifier: Identifier) -> EphemerisRecord:
        try:
            return self._ephemerides[identifier]
        except KeyError:
            raise ObjectNotFound(identifier, "ephemeris") from None

    def geoid(self, identifier: Identifier) -> Geoid:
        try:
            return self._geoids[identifier]
        except KeyError:
            raise ObjectNotFound(identifier, "geoid") from None

    def celestial_frame(self, identifier: Identifier) -> CelestialFrame:
        """Inertial view of a frame; gm from its geoid or linked ephemeris."""
        handle = self._frames.handle(identifier)
        if identifier in self._geoids:
            gm = self._geoids[identifier].gm
        else:
            node = self._frames.node(handle)
            linked = self._ephemerides.get(node.ephemeris) if node.ephemeris else None
            gm = (linked.parameter(GM) if linked else None) or 0.0
        return CelestialFrame(identifier, gm, handle)

    def geoid_frame(self, identifier: Identifier) -> GeoidFrame:
        handle = self._frames.handle(identifier)
        return GeoidFrame(self.geoid(identifier), handle)

    def free_frame(self, identifier: Identifier) -> FreeFrame:
        return FreeFrame(identifier, self._frames.handle(identifier))

    def frame(self, identifier: Identifier) -> Frame:
        """The natural variant of a frame: geoid, celestial, or free.

        Any frame with a derived geoid comes back as a :class:`GeoidFrame`,
        inertial barycentric frames such as the SSB included.  States in a
        geoid frame have no orbital energy; use :meth:`celestial_frame` for
        the inertial view of the same frame.
        """
        handle = self._frames.handle(identifier)
        if identifier in self._geoids:
            return GeoidFrame(self._geoids[identifier], handle)
        if self._frames.node(handle).ephemeris is not None:
            return self.celestial_frame(identifier)
        return FreeFrame(identifier, handle)

    # ════════════════════════════════════════════════════════════════════
    #  Hierarchy
    # ════════════════════════════════════════════════════════════════════

    def _handle(self, frame: Frame) -> int:
        return self._frames.handle(frame.identifier)

    def parent(self, frame: Frame) -> Optional[Frame]:
        p = self._frames.parent(self._handle(frame))
        return None if p is None else self.frame(self._frames.node(p).identifier)

    def ancestry(self, frame: Frame) -> list[Frame]:
        """``frame`` followed by each ancestor up to its root."""
        return [self.frame(self._frames.node(h).identifier)
                for h in self._frames.ancestry(self._handle(frame))]

    def rotation_to_parent(self, frame: Frame, epoch: float):
        return self._frames.rotation_to_parent(self._handle(frame), epoch)

    def rotation_between(self, src: Frame, dst: Frame, epoch: float):
        """Quaternion q with v_dst = q ⊗ v_src ⊗ q*."""
        return self._frames.rotation_between(self._handle(src), self._handle(dst), epoch)

    # ════════════════════════════════════════════════════════════════════
    #  State Queries
    # ════════════════════════════════════════════════════════════════════

    def state(self, body: Identifier, epoch: float, target_frame: Frame) -> State:
        """State of ``body`` at ``epoch`` [days] expressed in ``target_frame``.

        Raises
        ------
        ObjectNotFound — body absent from the ephemeris map
        NoInterpolationData — record has no interpolator
        UnsupportedInterpolation — variable-window record
        WindowOutOfRange, InvalidDegree — from the interpolation engine
        FrameTransformError — native and target frames cannot be related
        """
        record = self.ephemeris(body)
        if record.interpolator is None:
            raise NoInterpolationData(body)

        position, velocity = interpolate(record.interpolator, epoch,
                                         self.config, identifier=body)
        position, velocity = self._into_frame(record.ref_frame, target_frame,
                                              epoch, position, velocity)
        return State.from_position_velocity(*position, *velocity, target_frame)

    def _into_frame(self, native: Optional[Identifier], target: Frame,
                    epoch: float, position, velocity):
        if native is None or native == target.identifier:
            return position, velocity
        if native not in self._frames or target.identifier not in self._frames:
            raise FrameTransformError(
                f"cannot relate native frame {native} to {target.identifier}"
            )
        src = self._frames.handle(native)
        dst = self._frames.handle(target.identifier)
        if self._frames.origin(src) != self._frames.origin(dst):
            raise FrameTransformError(
                f"frames {native} and {target.identifier} have different origins; "
                f"translation between origins is not supported"
            )
        return self._frames.transform_state(src, dst, epoch, position, velocity,
                                            self.config.seconds_per_day)
