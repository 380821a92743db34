"""
Host adapter: reads native colliders into records and writes them back.

The converter core only sees CapsuleParamsA / CapsuleParamsB. This module
owns everything around it: finding which system a host object carries,
pulling the non-public center through a CenterAccessor, attaching the
converted collider and reporting batch outcomes.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np

from capsule_convert.contracts import (
    Axis,
    CapsuleConversionError,
    CapsuleParams,
    CapsuleParamsA,
    CapsuleParamsB,
    ConverterConfig,
    System,
    Vec3,
)
from capsule_convert.converter import convert

logger = logging.getLogger(__name__)


# ─── Center access ───────────────────────────────────────────────────────────

_ACCESS_ERRORS = (AttributeError, TypeError, ValueError, RuntimeError)


def _to_vec3(value) -> Vec3:
    return np.array(value, dtype=np.float64).reshape(3)


class CenterAccessor(ABC):
    """Reads and writes a collider's center offset."""

    @abstractmethod
    def get(self, handle) -> Vec3:
        """Center of *handle*, or the zero vector when it cannot be read."""

    @abstractmethod
    def set(self, handle, value: Vec3) -> bool:
        """Write the center of *handle*. Returns False when it cannot."""


class AttributeCenterAccessor(CenterAccessor):
    """Center access through attribute introspection.

    Tries a public ``center`` attribute, then the non-public ``_center``
    anywhere on the instance or its class hierarchy, then
    ``get_center()`` / ``set_center()``. A strategy that fails falls
    through to the next one; reads end at the zero vector.
    """

    public_name = "center"
    private_name = "_center"

    def get(self, handle) -> Vec3:
        for name in (self.public_name, self.private_name):
            try:
                if not self._has_field(handle, name):
                    continue
                value = getattr(handle, name)
                if callable(value):
                    continue
                return _to_vec3(value)
            except _ACCESS_ERRORS as exc:
                logger.debug("Center field %s unreadable on %s: %s", name, type(handle).__name__, exc)
        try:
            getter = getattr(handle, "get_center", None)
            if callable(getter):
                return _to_vec3(getter())
        except _ACCESS_ERRORS as exc:
            logger.debug("get_center failed on %s: %s", type(handle).__name__, exc)
        logger.debug("No center on %s; using zero offset", type(handle).__name__)
        return np.zeros(3)

    def set(self, handle, value: Vec3) -> bool:
        try:
            value = _to_vec3(value)
        except _ACCESS_ERRORS:
            logger.warning("Could not write center on %s: bad value %r", type(handle).__name__, value)
            return False
        for name in (self.public_name, self.private_name):
            try:
                if self._has_field(handle, name) and not callable(getattr(handle, name)):
                    setattr(handle, name, value)
                    return True
            except _ACCESS_ERRORS as exc:
                logger.debug("Center field %s unwritable on %s: %s", name, type(handle).__name__, exc)
        try:
            setter = getattr(handle, "set_center", None)
            if callable(setter):
                setter(value)
                return True
        except _ACCESS_ERRORS as exc:
            logger.debug("set_center failed on %s: %s", type(handle).__name__, exc)
        logger.warning("Could not write center on %s", type(handle).__name__)
        return False

    @staticmethod
    def _has_field(handle, name: str) -> bool:
        if name in getattr(handle, "__dict__", {}):
            return True
        return any(name in vars(klass) for klass in type(handle).__mro__)


# ─── Native collider stand-ins ───────────────────────────────────────────────

class NativeCapsuleA:
    """System A collider as the host exposes it."""

    def __init__(
        self,
        start_radius: float = 0.05,
        end_radius: float = 0.05,
        length: float = 0.1,
        axis_mode: Axis = Axis.X,
        center=(0.0, 0.0, 0.0),
    ):
        self.start_radius = start_radius
        self.end_radius = end_radius
        self.length = length  # half-length, caps excluded
        self.axis_mode = Axis.parse(axis_mode)
        self._center = np.array(center, dtype=np.float64)

    def __repr__(self):
        return (
            f"NativeCapsuleA(start_radius={self.start_radius}, end_radius={self.end_radius}, "
            f"length={self.length}, axis_mode={self.axis_mode.name})"
        )


class NativeCapsuleB:
    """System B collider as the host exposes it."""

    def __init__(
        self,
        size=(0.05, 0.05, 0.3),
        direction: Axis = Axis.X,
        aligned_on_center: bool = True,
        reverse_direction: bool = False,
        center=(0.0, 0.0, 0.0),
    ):
        self._size = np.array(size, dtype=np.float64)
        self.direction = Axis.parse(direction)
        self.aligned_on_center = aligned_on_center
        self.reverse_direction = reverse_direction
        self._center = np.array(center, dtype=np.float64)

    def get_size(self) -> Vec3:
        return self._size.copy()

    def set_size(self, start_radius: float, end_radius: float, length: float):
        self._size = np.array([start_radius, end_radius, length], dtype=np.float64)

    def __repr__(self):
        return (
            f"NativeCapsuleB(size={self._size.tolist()}, direction={self.direction.name}, "
            f"aligned_on_center={self.aligned_on_center}, "
            f"reverse_direction={self.reverse_direction})"
        )


@dataclass
class ColliderHost:
    """A host object carrying at most one capsule collider per system."""
    name: str
    colliders: Dict[System, object] = field(default_factory=dict)


# ─── Native <-> record ───────────────────────────────────────────────────────

def read_params(native, accessor: Optional[CenterAccessor] = None) -> CapsuleParams:
    """Read a native collider into a parameter record."""
    if accessor is None:
        accessor = AttributeCenterAccessor()
    center = accessor.get(native)
    if isinstance(native, NativeCapsuleA):
        return CapsuleParamsA(
            start_radius=float(native.start_radius),
            end_radius=float(native.end_radius),
            half_length=float(native.length),
            axis=native.axis_mode,
            center=center,
        )
    if isinstance(native, NativeCapsuleB):
        return CapsuleParamsB(
            size=native.get_size(),
            direction=native.direction,
            aligned_on_center=bool(native.aligned_on_center),
            reverse_direction=bool(native.reverse_direction),
            center=center,
        )
    raise CapsuleConversionError(f"Not a capsule collider: {type(native).__name__}")


def write_params(params: CapsuleParams, accessor: Optional[CenterAccessor] = None):
    """Build a fresh native collider from a parameter record."""
    if accessor is None:
        accessor = AttributeCenterAccessor()
    if isinstance(params, CapsuleParamsA):
        native = NativeCapsuleA(
            start_radius=params.start_radius,
            end_radius=params.end_radius,
            length=params.half_length,
            axis_mode=params.axis,
        )
    else:
        native = NativeCapsuleB(direction=params.direction)
        native.set_size(*params.size)
        native.aligned_on_center = params.aligned_on_center
        native.reverse_direction = params.reverse_direction
    accessor.set(native, params.center)
    return native


def detect_system(host: ColliderHost) -> Optional[System]:
    """Which system's collider the host carries, or None.

    Raises:
        CapsuleConversionError: if both systems are present
    """
    present = [system for system in (System.A, System.B) if host.colliders.get(system) is not None]
    if len(present) > 1:
        raise CapsuleConversionError(
            f"{host.name}: both System A and System B colliders are present"
        )
    return present[0] if present else None


# ─── Single-target and batch conversion ──────────────────────────────────────

def convert_host(
    host: ColliderHost,
    config: Optional[ConverterConfig] = None,
    accessor: Optional[CenterAccessor] = None,
) -> bool:
    """Convert the host's collider to the other system in place.

    Returns True on success. Hosts with no collider, or with both, are
    skipped with a warning.
    """
    if config is None:
        config = ConverterConfig()
    if accessor is None:
        accessor = AttributeCenterAccessor()

    try:
        source = detect_system(host)
    except CapsuleConversionError as exc:
        logger.warning("%s. Remove one before converting.", exc)
        return False
    if source is None:
        logger.warning("%s: no capsule collider found", host.name)
        return False

    params = read_params(host.colliders[source], accessor)
    result = convert(params, config)
    if not result.ok:
        logger.warning("%s: conversion rejected: %s", host.name, "; ".join(result.issues))
        return False

    target = System.B if source is System.A else System.A
    host.colliders[target] = write_params(result.params, accessor)
    if not config.keep_original:
        del host.colliders[source]

    logger.info("Converted %s: %s -> %s", host.name, source.value, target.value)
    return True


@dataclass
class BatchReport:
    """Counts from converting many hosts."""
    converted: int = 0
    skipped: int = 0
    conflicts: int = 0
    failed: int = 0
    converted_names: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.converted + self.skipped + self.conflicts + self.failed

    def summary(self) -> str:
        return (
            f"{self.converted}/{self.total} converted, {self.skipped} without collider, "
            f"{self.conflicts} with both systems, {self.failed} failed"
        )


def convert_hosts(
    hosts: Iterable[ColliderHost],
    config: Optional[ConverterConfig] = None,
    accessor: Optional[CenterAccessor] = None,
) -> BatchReport:
    """Convert every host in *hosts*; each one independently."""
    if config is None:
        config = ConverterConfig()
    if accessor is None:
        accessor = AttributeCenterAccessor()

    report = BatchReport()
    for host in hosts:
        try:
            source = detect_system(host)
        except CapsuleConversionError:
            logger.warning("Skipping %s: both systems present", host.name)
            report.conflicts += 1
            continue
        if source is None:
            report.skipped += 1
            continue

        try:
            ok = convert_host(host, config, accessor)
        except (CapsuleConversionError, TypeError, ValueError) as exc:
            logger.warning("Failed to convert %s: %s", host.name, exc)
            ok = False
        if ok:
            report.converted += 1
            report.converted_names.append(host.name)
        else:
            report.failed += 1

    logger.info("Batch conversion: %s", report.summary())
    return report
