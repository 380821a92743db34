"""JSON records for capsule parameters."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from capsule_convert.contracts import (
    CapsuleConversionError,
    CapsuleParams,
    CapsuleParamsA,
    CapsuleParamsB,
    System,
    system_of,
)


def record_to_dict(params: CapsuleParams) -> Dict[str, Any]:
    return {"system": system_of(params).value, "params": params.to_dict()}


def record_from_dict(payload: Dict[str, Any]) -> CapsuleParams:
    if not isinstance(payload, dict):
        raise CapsuleConversionError(f"Record must be an object, got {type(payload).__name__}")
    tag = str(payload.get("system", "")).strip().upper()
    body = payload.get("params")
    if not isinstance(body, dict):
        raise CapsuleConversionError("Record is missing its 'params' object")
    if tag == System.A.value:
        return CapsuleParamsA.from_dict(body)
    if tag == System.B.value:
        return CapsuleParamsB.from_dict(body)
    raise CapsuleConversionError(f"Unknown capsule system tag: {payload.get('system')!r}")


def load_records(path: Path) -> List[CapsuleParams]:
    """Read one record or a list of records from a JSON file."""
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        raise CapsuleConversionError(f"Cannot read records from {path}: {exc}") from None
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise CapsuleConversionError(f"Records file must hold an object or a list: {path}")
    return [record_from_dict(item) for item in payload]


def write_records(path: Path, records: List[CapsuleParams]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump([record_to_dict(r) for r in records], f, indent=2)
