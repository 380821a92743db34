"""
Shared test fixtures for capsule conversion tests.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from capsule_convert.contracts import Axis, CapsuleParamsA, CapsuleParamsB, ConverterConfig


@pytest.fixture
def tapered_a():
    """Y-axis capsule with a wide start cap (the reference scenario)."""
    return CapsuleParamsA(
        start_radius=0.1,
        end_radius=0.05,
        half_length=0.15,
        axis=Axis.Y,
        center=np.zeros(3),
    )


@pytest.fixture
def symmetric_a():
    """Z-axis capsule with equal caps and an off-origin center."""
    return CapsuleParamsA(
        start_radius=0.08,
        end_radius=0.08,
        half_length=0.2,
        axis=Axis.Z,
        center=np.array([0.1, -0.2, 0.3]),
    )


@pytest.fixture
def canonical_b():
    """X-axis System B capsule with a wide first cap."""
    return CapsuleParamsB(
        size=np.array([0.12, 0.04, 0.5]),
        direction=Axis.X,
        center=np.array([0.0, 0.5, 0.0]),
    )


@pytest.fixture
def default_config():
    return ConverterConfig()
