"""Tests for JSON records and config loading."""
import json

import numpy as np
import pytest

from capsule_convert.contracts import (
    Axis,
    CapsuleConversionError,
    CapsuleParamsA,
    CapsuleParamsB,
    ConverterConfig,
    load_config,
)
from capsule_convert.records import (
    load_records,
    record_from_dict,
    record_to_dict,
    write_records,
)


class TestRecordDicts:

    def test_a_record_shape(self, tapered_a):
        payload = record_to_dict(tapered_a)
        assert payload["system"] == "A"
        assert payload["params"]["axis"] == "Y"
        assert payload["params"]["center"] == [0.0, 0.0, 0.0]

    def test_b_record_back_to_params(self, canonical_b):
        params = record_from_dict(record_to_dict(canonical_b))
        assert isinstance(params, CapsuleParamsB)
        np.testing.assert_array_equal(params.size, canonical_b.size)
        assert params.direction is Axis.X

    def test_lowercase_tag_and_int_axis(self):
        params = record_from_dict({
            "system": "a",
            "params": {"start_radius": 0.1, "end_radius": 0.2, "half_length": 0.3, "axis": 2},
        })
        assert isinstance(params, CapsuleParamsA)
        assert params.axis is Axis.Z
        np.testing.assert_array_equal(params.center, [0.0, 0.0, 0.0])

    def test_unknown_tag(self):
        with pytest.raises(CapsuleConversionError, match="Unknown capsule system"):
            record_from_dict({"system": "C", "params": {}})

    def test_missing_field(self):
        with pytest.raises(CapsuleConversionError, match="half_length"):
            record_from_dict({"system": "A", "params": {"start_radius": 0.1, "end_radius": 0.1}})

    def test_bad_axis_name(self):
        with pytest.raises(CapsuleConversionError, match="Unknown axis"):
            record_from_dict({"system": "B", "params": {"size": [1, 1, 3], "direction": "W"}})

    def test_bad_size_shape(self):
        with pytest.raises(CapsuleConversionError, match="3-vector"):
            record_from_dict({"system": "B", "params": {"size": [1, 1]}})

    def test_non_numeric_radius(self):
        with pytest.raises(CapsuleConversionError, match="non-numeric"):
            record_from_dict({
                "system": "A",
                "params": {"start_radius": "abc", "end_radius": 0.1, "half_length": 0.2},
            })

    def test_non_numeric_center(self):
        with pytest.raises(CapsuleConversionError, match="3-vector of numbers"):
            record_from_dict({"system": "B", "params": {"size": [1, 1, 3], "center": ["a", 0, 0]}})

    def test_float_axis_rejected(self):
        with pytest.raises(CapsuleConversionError, match="Unknown axis value"):
            record_from_dict({
                "system": "A",
                "params": {"start_radius": 0.1, "end_radius": 0.1, "half_length": 0.2, "axis": 1.5},
            })

    def test_string_flag_rejected(self):
        with pytest.raises(CapsuleConversionError, match="aligned_on_center must be true or false"):
            record_from_dict({
                "system": "B",
                "params": {"size": [0.1, 0.1, 1.0], "aligned_on_center": "false"},
            })

    def test_bool_flags_kept(self):
        params = record_from_dict({
            "system": "B",
            "params": {"size": [0.1, 0.1, 1.0], "aligned_on_center": False, "reverse_direction": True},
        })
        assert params.aligned_on_center is False
        assert params.reverse_direction is True


class TestRecordFiles:

    def test_single_record_file(self, tmp_path, tapered_a):
        path = tmp_path / "one.json"
        path.write_text(json.dumps(record_to_dict(tapered_a)), encoding="utf-8")
        records = load_records(path)
        assert len(records) == 1
        assert records[0].start_radius == 0.1

    def test_write_then_load(self, tmp_path, tapered_a, canonical_b):
        path = tmp_path / "nested" / "records.json"
        write_records(path, [tapered_a, canonical_b])
        records = load_records(path)
        assert [type(r) for r in records] == [CapsuleParamsA, CapsuleParamsB]


class TestLoadConfig:

    def test_defaults(self):
        config = load_config(None)
        assert config == ConverterConfig()
        assert config.min_half_length == 0.001

    def test_overrides(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"strict": True, "min_half_length": 0.01}), encoding="utf-8")
        config = load_config(str(path))
        assert config.strict is True
        assert config.min_half_length == 0.01
        assert config.keep_original is False

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"min_halflength": 0.01}), encoding="utf-8")
        with pytest.raises(CapsuleConversionError, match="min_halflength"):
            load_config(str(path))

    def test_non_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(CapsuleConversionError, match="JSON object"):
            load_config(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(CapsuleConversionError, match="Cannot read config"):
            load_config(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{strict: yes", encoding="utf-8")
        with pytest.raises(CapsuleConversionError, match="Cannot read config"):
            load_config(str(path))
