"""
Tests for canonical serializations.

Test plan:
- Source string: type tags, NUL joins, bracketed arrays, sorted keys
- JSON source string: sorted keys, no whitespace, non-ASCII kept,
  integral floats rendered without a fraction
- Both reject null, empty arrays, empty objects, unknown types
- canonical_json: sorted, compact, tolerant of empty containers
"""

import pytest

from obyte.canonical_json import (
    canonical_json,
    canonical_json_bytes,
    get_json_source_string,
    get_source_string,
)

# ---------------------------------------------------------------------------
# Source string
# ---------------------------------------------------------------------------


class TestSourceString:
    def test_definition_shape(self) -> None:
        definition = ["sig", {"pubkey": "abc"}]
        assert get_source_string(definition) == "[\x00s\x00sig\x00pubkey\x00s\x00abc\x00]"

    def test_scalars_are_type_tagged(self) -> None:
        assert get_source_string("x") == "s\x00x"
        assert get_source_string(5) == "n\x005"
        assert get_source_string(True) == "b\x00true"
        assert get_source_string(False) == "b\x00false"

    def test_keys_sorted(self) -> None:
        assert get_source_string({"b": 1, "a": 2}) == "a\x00n\x002\x00b\x00n\x001"

    def test_integral_float_has_no_fraction(self) -> None:
        assert get_source_string(1.0) == get_source_string(1)

    def test_rejects_null(self) -> None:
        with pytest.raises(ValueError, match="null"):
            get_source_string({"a": None})

    def test_rejects_empty_array(self) -> None:
        with pytest.raises(ValueError, match="empty array"):
            get_source_string({"a": []})

    def test_rejects_empty_object(self) -> None:
        with pytest.raises(ValueError, match="empty object"):
            get_source_string([{}])

    def test_rejects_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="unknown type"):
            get_source_string({"a": object()})


# ---------------------------------------------------------------------------
# JSON source string
# ---------------------------------------------------------------------------


class TestJsonSourceString:
    def test_sorted_and_compact(self) -> None:
        assert get_json_source_string({"b": 1, "a": [True, "x"]}) == '{"a":[true,"x"],"b":1}'

    def test_non_ascii_not_escaped(self) -> None:
        assert get_json_source_string({"k": "héllo"}) == '{"k":"héllo"}'

    def test_strings_are_json_escaped(self) -> None:
        assert get_json_source_string('a"b\n') == '"a\\"b\\n"'

    def test_integral_float(self) -> None:
        assert get_json_source_string({"n": 2.0}) == '{"n":2}'

    def test_fractional_float(self) -> None:
        assert get_json_source_string(0.5) == "0.5"

    def test_rejects_nan(self) -> None:
        with pytest.raises(ValueError):
            get_json_source_string(float("nan"))

    def test_rejects_null(self) -> None:
        with pytest.raises(ValueError, match="null"):
            get_json_source_string([None])

    def test_rejects_empty_containers(self) -> None:
        with pytest.raises(ValueError):
            get_json_source_string({"a": []})
        with pytest.raises(ValueError):
            get_json_source_string({})


# ---------------------------------------------------------------------------
# canonical_json
# ---------------------------------------------------------------------------


class TestCanonicalJson:
    def test_sorted_compact(self) -> None:
        assert canonical_json({"b": [], "a": {}}) == '{"a":{},"b":[]}'

    def test_bytes_are_utf8(self) -> None:
        assert canonical_json_bytes(["é"]) == '["é"]'.encode("utf-8")

    def test_deterministic_regardless_of_insertion_order(self) -> None:
        assert canonical_json({"x": 1, "y": 2}) == canonical_json({"y": 2, "x": 1})
