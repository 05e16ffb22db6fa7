"""
astrocosm.errors — Exception Taxonomy
=======================================

Every failure the registry can report is a typed, recoverable exception
rooted at :class:`CosmError`.  None of them is ever replaced by a default
value (a zero state is not a valid answer to a failed query).

::

    CosmError
    ├── LoadError
    │   └── GeoidDerivationError     (collected per record, not raised by build)
    └── QueryError
        ├── ObjectNotFound           (also KeyError)
        ├── NoInterpolationData
        ├── UnsupportedInterpolation
        ├── WindowOutOfRange         (also IndexError)
        ├── InvalidDegree            (also ValueError)
        └── FrameTransformError
"""


class CosmError(Exception):
    """Base class for all registry and query failures."""


class LoadError(CosmError):
    """The registry could not be built from the supplied records."""


class GeoidDerivationError(LoadError):
    """A frame record links a GM-bearing ephemeris but lacks a geoid parameter."""

    def __init__(self, identifier, missing: str):
        self.identifier = identifier
        self.missing = missing
        super().__init__(
            f"cannot derive geoid for {identifier}: missing parameter '{missing}'"
        )


class QueryError(CosmError):
    """A state query could not be answered."""


class ObjectNotFound(QueryError, KeyError):
    def __init__(self, identifier, collection: str = "ephemeris"):
        self.identifier = identifier
        self.collection = collection
        super().__init__(f"{identifier} not found in {collection} map")

    def __str__(self) -> str:
        # KeyError would otherwise wrap the message in quotes
        return self.args[0]


class NoInterpolationData(QueryError):
    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f"{identifier} has no interpolation data")


class UnsupportedInterpolation(QueryError):
    def __init__(self, identifier, variant: str = "VariableWindow"):
        self.identifier = identifier
        self.variant = variant
        super().__init__(f"{identifier} uses unsupported interpolation: {variant}")


class WindowOutOfRange(QueryError, IndexError):
    def __init__(self, window_index: int, num_windows: int, epoch: float):
        self.window_index = window_index
        self.num_windows = num_windows
        self.epoch = epoch
        super().__init__(
            f"epoch {epoch} selects window {window_index}, "
            f"but only {num_windows} windows are stored"
        )


class InvalidDegree(QueryError, ValueError):
    def __init__(self, degree: int, reason: str = "degree must be at least 2"):
        self.degree = degree
        super().__init__(f"invalid interpolation degree {degree}: {reason}")


class FrameTransformError(QueryError):
    """No rotation/translation chain connects the two frames."""
