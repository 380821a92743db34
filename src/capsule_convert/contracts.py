"""Contracts for capsule collider conversion between System A and System B."""

from __future__ import annotations

import json
import numbers
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

Vec3 = np.ndarray  # (3,) float64

DEFAULT_MIN_HALF_LENGTH = 0.001


class CapsuleConversionError(ValueError):
    """Raised when a record, config, or native collider cannot be converted."""


class Axis(Enum):
    """Local axis a capsule extends along. Values match the host enum."""
    X = 0
    Y = 1
    Z = 2

    @classmethod
    def parse(cls, value: Union["Axis", int, str]) -> "Axis":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise CapsuleConversionError(f"Unknown axis name: {value!r}") from None
        # bools and floats are not enum discriminants
        if isinstance(value, numbers.Integral) and not isinstance(value, (bool, np.bool_)):
            try:
                return cls(int(value))
            except ValueError:
                pass
        raise CapsuleConversionError(f"Unknown axis value: {value!r}")


class System(Enum):
    """Which parameterization a collider record belongs to."""
    A = "A"
    B = "B"


def _as_vec3(value: Any) -> Vec3:
    try:
        arr = np.asarray(value, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError):
        raise CapsuleConversionError(f"Expected a 3-vector of numbers, got {value!r}") from None
    if arr.shape != (3,):
        raise CapsuleConversionError(f"Expected a 3-vector, got shape {arr.shape}")
    return arr.copy()


def _as_flag(payload: Dict[str, Any], key: str, default: bool) -> bool:
    value = payload.get(key, default)
    if not isinstance(value, bool):
        raise CapsuleConversionError(f"{key} must be true or false, got {value!r}")
    return value


@dataclass
class CapsuleParamsA:
    """
    System A capsule: per-cap radii plus half the cylinder length.

    Attributes:
        start_radius: Radius of the cap on the negative side of the axis
        end_radius: Radius of the cap on the positive side of the axis
        half_length: Half the cylindrical mid-section, caps excluded
        axis: Local axis the capsule extends along
        center: Local-space offset of the capsule center
    """
    start_radius: float
    end_radius: float
    half_length: float
    axis: Axis = Axis.X
    center: Vec3 = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.axis = Axis.parse(self.axis)
        self.center = _as_vec3(self.center)

    @property
    def total_length(self) -> float:
        """Collision length along the axis including both caps."""
        return 2.0 * self.half_length + self.start_radius + self.end_radius

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_radius": float(self.start_radius),
            "end_radius": float(self.end_radius),
            "half_length": float(self.half_length),
            "axis": self.axis.name,
            "center": [float(c) for c in self.center],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CapsuleParamsA":
        try:
            return cls(
                start_radius=float(payload["start_radius"]),
                end_radius=float(payload["end_radius"]),
                half_length=float(payload["half_length"]),
                axis=payload.get("axis", "X"),
                center=payload.get("center", (0.0, 0.0, 0.0)),
            )
        except KeyError as exc:
            raise CapsuleConversionError(f"System A record missing field: {exc.args[0]}") from None
        except CapsuleConversionError:
            raise
        except (TypeError, ValueError) as exc:
            raise CapsuleConversionError(f"System A record has a non-numeric field: {exc}") from None


@dataclass
class CapsuleParamsB:
    """
    System B capsule: a size vector plus centering flags.

    Attributes:
        size: (radius at one cap, radius at the other cap, total length)
        direction: Local axis the capsule extends along
        aligned_on_center: Center is the volume centroid, not an endpoint
        reverse_direction: Capsule axis is flipped
        center: Local-space offset of the capsule center
    """
    size: Vec3
    direction: Axis = Axis.X
    aligned_on_center: bool = True
    reverse_direction: bool = False
    center: Vec3 = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self):
        self.size = _as_vec3(self.size)
        self.direction = Axis.parse(self.direction)
        self.center = _as_vec3(self.center)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": [float(s) for s in self.size],
            "direction": self.direction.name,
            "aligned_on_center": bool(self.aligned_on_center),
            "reverse_direction": bool(self.reverse_direction),
            "center": [float(c) for c in self.center],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CapsuleParamsB":
        if "size" not in payload:
            raise CapsuleConversionError("System B record missing field: size")
        return cls(
            size=payload["size"],
            direction=payload.get("direction", "X"),
            aligned_on_center=_as_flag(payload, "aligned_on_center", True),
            reverse_direction=_as_flag(payload, "reverse_direction", False),
            center=payload.get("center", (0.0, 0.0, 0.0)),
        )


CapsuleParams = Union[CapsuleParamsA, CapsuleParamsB]


def system_of(params: CapsuleParams) -> System:
    """Origin tag of a parameter record."""
    if isinstance(params, CapsuleParamsA):
        return System.A
    if isinstance(params, CapsuleParamsB):
        return System.B
    raise CapsuleConversionError(
        f"Unsupported capsule record type: {type(params).__name__}"
    )


@dataclass
class ConverterConfig:
    """Knobs shared by the converter, host adapter and CLI."""

    min_half_length: float = DEFAULT_MIN_HALF_LENGTH  # floor for B -> A length
    strict: bool = False  # reject inputs that fail validate_params
    keep_original: bool = False  # leave the source collider on the host

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ConverterConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(payload) - known)
        if unknown:
            raise CapsuleConversionError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**payload)


def load_config(path: Optional[str] = None) -> ConverterConfig:
    """Load a ConverterConfig from a JSON object of overrides.

    Returns the defaults when *path* is None.
    """
    if path is None:
        return ConverterConfig()
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        raise CapsuleConversionError(f"Cannot read config {path}: {exc}") from None
    if not isinstance(payload, dict):
        raise CapsuleConversionError(f"Config file must hold a JSON object: {path}")
    return ConverterConfig.from_dict(payload)


@dataclass
class ConversionResult:
    """Outcome of a single dispatched conversion."""

    ok: bool
    source_system: System
    params: Optional[CapsuleParams] = None
    issues: List[str] = field(default_factory=list)
