"""
Explicit collision geometry for capsule records.

Either parameterization reduces to a CapsuleSegment: two sphere centers with
their own radii, swept along the capsule axis. Comparing segments is how the
converter's "same physical volume" guarantee is checked, and the segment is
what the preview mesh is built from.
"""
import logging
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import trimesh

from capsule_convert.contracts import (
    Axis,
    CapsuleConversionError,
    CapsuleParams,
    CapsuleParamsA,
    CapsuleParamsB,
    System,
    Vec3,
    system_of,
)
from capsule_convert.converter import axis_unit_vector

logger = logging.getLogger(__name__)


@dataclass
class CapsuleSegment:
    """Sphere-swept segment between two cap spheres."""
    start: Vec3           # (3,) negative-side sphere center
    end: Vec3             # (3,) positive-side sphere center
    start_radius: float
    end_radius: float
    axis: Axis

    @property
    def axis_vector(self) -> Vec3:
        return axis_unit_vector(self.axis)

    def axial_extent(self) -> Tuple[float, float]:
        """(lo, hi) of the volume measured along the unit axis."""
        u = self.axis_vector
        s = float(self.start @ u)
        e = float(self.end @ u)
        lo = min(s - self.start_radius, e - self.end_radius)
        hi = max(s + self.start_radius, e + self.end_radius)
        return lo, hi


def segment_from_a(params: CapsuleParamsA) -> CapsuleSegment:
    u = axis_unit_vector(params.axis)
    return CapsuleSegment(
        start=params.center - params.half_length * u,
        end=params.center + params.half_length * u,
        start_radius=float(params.start_radius),
        end_radius=float(params.end_radius),
        axis=params.axis,
    )


def segment_from_b(params: CapsuleParamsB) -> CapsuleSegment:
    """Segment for a System B record.

    The volume spans center +/- size.z / 2 along the axis, with the size.y
    cap on the negative side and the size.x cap on the positive side.
    """
    if not params.aligned_on_center or params.reverse_direction:
        logger.warning(
            "Non-canonical System B flags (aligned_on_center=%s, reverse_direction=%s); "
            "treating as centered and not reversed",
            params.aligned_on_center, params.reverse_direction,
        )
    u = axis_unit_vector(params.direction)
    size_x, size_y, size_z = (float(v) for v in params.size)
    half_extent = size_z * 0.5
    return CapsuleSegment(
        start=params.center + (size_y - half_extent) * u,
        end=params.center + (half_extent - size_x) * u,
        start_radius=size_y,
        end_radius=size_x,
        axis=params.direction,
    )


def to_segment(params: CapsuleParams) -> CapsuleSegment:
    if system_of(params) is System.A:
        return segment_from_a(params)
    return segment_from_b(params)


def volumes_match(first: CapsuleParams, second: CapsuleParams, atol: float = 1e-6) -> bool:
    """True when two records (of either system) describe the same volume."""
    a = to_segment(first)
    b = to_segment(second)
    if a.axis is not b.axis:
        return False
    return (
        np.allclose(a.start, b.start, atol=atol)
        and np.allclose(a.end, b.end, atol=atol)
        and math.isclose(a.start_radius, b.start_radius, abs_tol=atol)
        and math.isclose(a.end_radius, b.end_radius, abs_tol=atol)
    )


def collision_bounds(params: CapsuleParams) -> Tuple[Vec3, Vec3]:
    """Axis-aligned (min, max) corners of the collision volume."""
    seg = to_segment(params)
    lo = np.minimum(seg.start - seg.start_radius, seg.end - seg.end_radius)
    hi = np.maximum(seg.start + seg.start_radius, seg.end + seg.end_radius)
    return lo, hi


# ─── Mesh construction ───────────────────────────────────────────────────────

def build_capsule_mesh(
    params: CapsuleParams,
    sections: int = 32,
    cap_segments: int = 8,
) -> trimesh.Trimesh:
    """Build a closed triangle mesh of the (possibly tapered) capsule.

    Args:
        params: System A or System B record
        sections: number of steps around the capsule axis
        cap_segments: number of latitude steps per cap

    Raises:
        CapsuleConversionError: if both radii are zero (no volume)
    """
    seg = to_segment(params)
    if max(seg.start_radius, seg.end_radius) <= 0.0:
        raise CapsuleConversionError("Capsule with zero radii has no volume")

    u = seg.axis_vector
    length = float((seg.end - seg.start) @ u)
    profile = _capsule_profile(seg.start_radius, seg.end_radius, length, cap_segments)

    mesh = trimesh.creation.revolve(profile, sections=sections)

    transform = np.eye(4)
    transform[:3, :3] = _axis_frame(seg.axis)
    transform[:3, 3] = seg.start
    mesh.apply_transform(transform)
    mesh.metadata["capsule_system"] = system_of(params).value
    return mesh


def _capsule_profile(
    start_radius: float,
    end_radius: float,
    length: float,
    cap_segments: int,
) -> np.ndarray:
    """(n, 2) radius/height outline from the bottom pole to the top pole.

    The two caps are joined along their common tangent, which sits at
    latitude asin((r_low - r_high) / distance) on both spheres.
    """
    caps = sorted([(0.0, start_radius), (length, end_radius)])
    (z_low, r_low), (z_high, r_high) = caps
    dist = z_high - z_low

    if dist <= abs(r_low - r_high):
        # One sphere swallows the other
        z, r = max(caps, key=lambda c: c[1])
        thetas = np.linspace(-math.pi / 2, math.pi / 2, 2 * cap_segments + 1)
        points = [(r * math.cos(t), z + r * math.sin(t)) for t in thetas]
    else:
        tangent = math.asin((r_low - r_high) / dist)
        low = np.linspace(-math.pi / 2, tangent, cap_segments + 1)
        high = np.linspace(tangent, math.pi / 2, cap_segments + 1)
        points = [(r_low * math.cos(t), z_low + r_low * math.sin(t)) for t in low]
        points += [(r_high * math.cos(t), z_high + r_high * math.sin(t)) for t in high]

    profile = np.array(points, dtype=np.float64)
    # Poles sit exactly on the revolve axis
    profile[0, 0] = 0.0
    profile[-1, 0] = 0.0
    return profile


def _axis_frame(axis: Axis) -> np.ndarray:
    """Rotation taking the revolve axis (+Z) onto *axis*, det = +1."""
    u = axis_unit_vector(axis)
    # Cyclic permutation keeps the frame right-handed
    v = np.roll(u, 1)
    w = np.roll(u, 2)
    return np.column_stack([v, w, u])
