"""Public API for capsule collider conversion between System A and System B."""

from capsule_convert.contracts import (
    Axis,
    CapsuleConversionError,
    CapsuleParamsA,
    CapsuleParamsB,
    ConversionResult,
    ConverterConfig,
    System,
    load_config,
)
from capsule_convert.converter import (
    axis_unit_vector,
    convert,
    convert_a_to_b,
    convert_b_to_a,
    validate_params,
)

__all__ = [
    "Axis",
    "CapsuleConversionError",
    "CapsuleParamsA",
    "CapsuleParamsB",
    "ConversionResult",
    "ConverterConfig",
    "System",
    "axis_unit_vector",
    "convert",
    "convert_a_to_b",
    "convert_b_to_a",
    "load_config",
    "validate_params",
]
