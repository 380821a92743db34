#!/usr/bin/env python3
"""
Convert capsule collider records between System A and System B.

Reads a JSON file holding one record or a list of records, converts each
to the other system, and writes the converted records. Optionally exports
an STL of every input and output volume for visual comparison.

Usage:
    python scripts/convert_capsules.py --input colliders.json
    python scripts/convert_capsules.py --input colliders.json --output out.json --strict
    python scripts/convert_capsules.py --input colliders.json --export-mesh meshes/ -v
"""
import sys
import argparse
import logging
from dataclasses import replace
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from capsule_convert import CapsuleConversionError, convert, load_config
from capsule_convert.records import load_records, write_records
from capsule_convert.volume import build_capsule_mesh, volumes_match

logger = logging.getLogger("convert_capsules")


def main():
    parser = argparse.ArgumentParser(
        description="Convert capsule colliders between System A and System B.",
    )
    parser.add_argument(
        "--input", required=True,
        help="JSON file with one record or a list of records",
    )
    parser.add_argument(
        "--output", default=None,
        help="Output JSON path (default: <input_stem>_converted.json)",
    )
    parser.add_argument(
        "--config", default=None,
        help="JSON file with ConverterConfig overrides",
    )
    parser.add_argument(
        "--strict", action="store_true",
        help="Reject records with negative or non-finite values",
    )
    parser.add_argument(
        "--min-half-length", type=float, default=None,
        help="Floor for the recovered System A half-length (default: 0.001)",
    )
    parser.add_argument(
        "--export-mesh", default=None, metavar="DIR",
        help="Write input/output STL meshes into DIR",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(args.input).resolve()
    if not input_path.is_file():
        parser.error(f"Input file not found: {input_path}")
    output_path = (
        Path(args.output).resolve() if args.output
        else input_path.with_name(f"{input_path.stem}_converted.json")
    )

    try:
        config = load_config(args.config)
        records = load_records(input_path)
    except CapsuleConversionError as exc:
        parser.error(str(exc))

    if args.strict:
        config = replace(config, strict=True)
    if args.min_half_length is not None:
        config = replace(config, min_half_length=args.min_half_length)

    mesh_dir = Path(args.export_mesh).resolve() if args.export_mesh else None
    if mesh_dir is not None:
        mesh_dir.mkdir(parents=True, exist_ok=True)

    converted = []
    rejected = 0
    for index, record in enumerate(records):
        result = convert(record, config)
        if not result.ok:
            rejected += 1
            print(f"  [{index}] System {result.source_system.value}: REJECTED")
            for issue in result.issues:
                print(f"        - {issue}")
            continue

        for issue in result.issues:
            logger.warning("[%d] %s", index, issue)
        if not volumes_match(record, result.params, atol=1e-5):
            logger.info("[%d] volume changed by clamping or non-canonical flags", index)
        converted.append(result.params)

        target = "B" if result.source_system.value == "A" else "A"
        print(f"  [{index}] System {result.source_system.value} -> System {target}")

        if mesh_dir is not None:
            for tag, params in (("in", record), ("out", result.params)):
                try:
                    mesh = build_capsule_mesh(params)
                except CapsuleConversionError as exc:
                    logger.warning("[%d] no mesh for %s: %s", index, tag, exc)
                    continue
                mesh.export(str(mesh_dir / f"capsule_{index:03d}_{tag}.stl"))

    write_records(output_path, converted)

    print(f"\nConverted {len(converted)}/{len(records)} records -> {output_path}")
    if mesh_dir is not None:
        print(f"Meshes: {mesh_dir}")
    if rejected:
        sys.exit(1)


if __name__ == "__main__":
    main()
