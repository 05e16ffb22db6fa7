"""
astrocosm.config — Engine Configuration
=========================================

Numeric conventions and domain overrides used by the registry, the
interpolation engine and the geodetic solver.  The defaults reproduce the
documented behaviour; a YAML file and environment variables can override
them.
"""

import logging
import math
import os
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .utils import (
    GM_SSB, WGS84_SEMI_MAJOR, DAILY_SECONDS,
    SSB_NUMBER, EARTH_BARYCENTER_NAME,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ASTROCOSM_CONFIG"


class CosmConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    ssb_number: int = SSB_NUMBER
    ssb_gm: float = GM_SSB
    earth_barycenter_name: str = EARTH_BARYCENTER_NAME
    earth_semi_major_radius: float = WGS84_SEMI_MAJOR
    seconds_per_day: float = DAILY_SECONDS
    latitude_tolerance: float = 1e-12
    latitude_max_iterations: int = 20
    pole_threshold: float = 0.1
    window_rounding: Literal["nearest", "floor"] = "nearest"

    @field_validator("ssb_gm", "earth_semi_major_radius",
                     "seconds_per_day", "latitude_tolerance")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0.0:
            raise ValueError("must be strictly positive")
        return v

    @field_validator("latitude_max_iterations")
    @classmethod
    def validate_iterations(cls, v):
        if v < 1:
            raise ValueError("at least one latitude iteration is required")
        return v

    @field_validator("pole_threshold")
    @classmethod
    def validate_pole_threshold(cls, v):
        if not 0.0 < v < math.pi / 2:
            raise ValueError("pole threshold must lie in (0, π/2) rad")
        return v

    @field_validator("earth_barycenter_name")
    @classmethod
    def validate_name(cls, v):
        if not v:
            raise ValueError("Earth barycenter name cannot be empty")
        return v


DEFAULT_CONFIG = CosmConfig()


def load_config(path: Optional[str] = None) -> CosmConfig:
    """Load configuration from a YAML file with environment variable overrides.

    The path defaults to ``$ASTROCOSM_CONFIG``; with neither set, or when
    the file does not exist, the defaults are used.
    """
    path = path or os.environ.get(CONFIG_ENV_VAR)
    data = {}
    if path:
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Config file %s not found, using defaults", path)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {path}: {e}") from e

    if "ASTROCOSM_SECONDS_PER_DAY" in os.environ:
        data["seconds_per_day"] = float(os.environ["ASTROCOSM_SECONDS_PER_DAY"])
    if "ASTROCOSM_LATITUDE_TOLERANCE" in os.environ:
        data["latitude_tolerance"] = float(os.environ["ASTROCOSM_LATITUDE_TOLERANCE"])
    if "ASTROCOSM_LATITUDE_MAX_ITERATIONS" in os.environ:
        data["latitude_max_iterations"] = int(os.environ["ASTROCOSM_LATITUDE_MAX_ITERATIONS"])

    try:
        return CosmConfig(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid astrocosm configuration: {e}") from e
