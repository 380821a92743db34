"""
Bidirectional capsule geometry conversion between System A and System B.

System A stores per-cap radii and a half-length that excludes the caps.
System B stores a size vector (cap radius, cap radius, total length) with
the center at the volume centroid. The radius slots are swapped between the
two systems, and when the caps differ the two centers sit half the radius
difference apart along the capsule axis.

All functions here are pure: no I/O, no shared state.
"""
import logging
import math
from typing import List, Optional

import numpy as np

from capsule_convert.contracts import (
    Axis,
    CapsuleConversionError,
    CapsuleParams,
    CapsuleParamsA,
    CapsuleParamsB,
    ConversionResult,
    ConverterConfig,
    DEFAULT_MIN_HALF_LENGTH,
    System,
    Vec3,
    system_of,
)

logger = logging.getLogger(__name__)

_AXIS_VECTORS = {
    Axis.X: (1.0, 0.0, 0.0),  # right
    Axis.Y: (0.0, 1.0, 0.0),  # up
    Axis.Z: (0.0, 0.0, 1.0),  # forward
}


def axis_unit_vector(axis) -> Vec3:
    """Unit basis vector for *axis*. Unknown values fall back to X."""
    try:
        axis = Axis.parse(axis)
    except CapsuleConversionError:
        axis = Axis.X
    return np.array(_AXIS_VECTORS[axis], dtype=np.float64)


def convert_a_to_b(params: CapsuleParamsA) -> CapsuleParamsB:
    """Convert a System A capsule to System B.

    Args:
        params: System A record. Not validated; degenerate values propagate.

    Returns:
        A new System B record describing the same collision volume.
    """
    start_r = params.start_radius
    end_r = params.end_radius

    # B's first slot holds A's end radius
    size = np.array(
        [end_r, start_r, 2.0 * params.half_length + start_r + end_r],
        dtype=np.float64,
    )

    center = np.array(params.center, dtype=np.float64)
    if start_r != end_r:
        offset = (end_r - start_r) * 0.5
        center = center + offset * axis_unit_vector(params.axis)

    return CapsuleParamsB(
        size=size,
        direction=params.axis,
        aligned_on_center=True,
        reverse_direction=False,
        center=center,
    )


def convert_b_to_a(
    params: CapsuleParamsB,
    min_half_length: float = DEFAULT_MIN_HALF_LENGTH,
) -> CapsuleParamsA:
    """Convert a System B capsule to System A.

    Inverse of convert_a_to_b. The recovered half-length is floored at
    *min_half_length*, so compressed inputs (size.z < size.x + size.y) do
    not round-trip exactly. The aligned_on_center and reverse_direction
    flags are not read; canonical geometry is assumed.
    """
    size_x, size_y, size_z = (float(v) for v in params.size)

    raw_half_length = (size_z - size_x - size_y) * 0.5
    half_length = max(raw_half_length, min_half_length)
    if half_length != raw_half_length:
        logger.debug(
            "Clamped half-length %.6g -> %.6g (size=%s)",
            raw_half_length, half_length, params.size.tolist(),
        )

    center = np.array(params.center, dtype=np.float64)
    if size_x != size_y:
        offset = -(size_x - size_y) * 0.5
        center = center + offset * axis_unit_vector(params.direction)

    return CapsuleParamsA(
        start_radius=size_y,
        end_radius=size_x,
        half_length=half_length,
        axis=params.direction,
        center=center,
    )


def validate_params(params: CapsuleParams) -> List[str]:
    """Check a record for physically invalid values.

    Returns list of issue strings (empty = ok).
    """
    issues = []
    if isinstance(params, CapsuleParamsA):
        scalars = {
            "start_radius": params.start_radius,
            "end_radius": params.end_radius,
            "half_length": params.half_length,
        }
        for name, value in scalars.items():
            if not math.isfinite(value):
                issues.append(f"{name} is not finite: {value}")
            elif value < 0:
                issues.append(f"{name} is negative: {value}")
        if not np.all(np.isfinite(params.center)):
            issues.append("center has non-finite components")
        return issues

    system_of(params)
    for label, value in zip(("size.x", "size.y", "size.z"), params.size):
        if not math.isfinite(value):
            issues.append(f"{label} is not finite: {value}")
        elif value < 0:
            issues.append(f"{label} is negative: {value}")
    if not issues and params.size[2] < params.size[0] + params.size[1]:
        issues.append(
            f"size.z ({params.size[2]}) is shorter than both caps "
            f"({params.size[0] + params.size[1]})"
        )
    if not np.all(np.isfinite(params.center)):
        issues.append("center has non-finite components")
    if not params.aligned_on_center:
        issues.append("aligned_on_center is False; converted as if centered")
    if params.reverse_direction:
        issues.append("reverse_direction is True; converted as if not reversed")
    return issues


def convert(
    params: CapsuleParams,
    config: Optional[ConverterConfig] = None,
) -> ConversionResult:
    """Convert a record to the other system, dispatching on its type.

    In strict mode any validation issue rejects the input; otherwise the
    issues are reported alongside the converted record.
    """
    if config is None:
        config = ConverterConfig()

    source = system_of(params)
    issues = validate_params(params)
    if issues and config.strict:
        logger.warning("Rejected System %s capsule: %s", source.value, "; ".join(issues))
        return ConversionResult(ok=False, source_system=source, issues=issues)

    if source is System.A:
        converted = convert_a_to_b(params)
    else:
        converted = convert_b_to_a(params, min_half_length=config.min_half_length)
    return ConversionResult(ok=True, source_system=source, params=converted, issues=issues)
