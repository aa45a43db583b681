"""
Tests for version code encoding.

All tests in this file are marked as 'short' since they don't require
external dependencies, containers, or network I/O.
"""

import pytest

from prversion.versioning.code import MAX_CODE, decode, encode, validate_pr_id
from prversion.versioning.exceptions import VersionRangeError, VersionValidationError
from prversion.versioning.version import SemanticVersion


@pytest.mark.short
class TestEncode:
    def test_fields_land_in_decimal_slots(self):
        assert encode(SemanticVersion(1, 0, 2), 3) == 1000203
        assert encode(SemanticVersion(12, 34, 56), 78) == 12345678
        assert encode(SemanticVersion(0, 0, 0), 0) == 0

    def test_same_version_different_prs(self):
        version = SemanticVersion(1, 0, 2)
        assert encode(version, 2) == 1000202
        assert encode(version, 3) == 1000203

    def test_ceiling(self):
        assert encode(SemanticVersion(99, 99, 99), 99) == 99999999 == MAX_CODE

    @pytest.mark.parametrize("pr_id", [-1, 100, 1000, "3", 2.0, None])
    def test_invalid_pr_id(self, pr_id):
        with pytest.raises(VersionRangeError):
            encode(SemanticVersion(1, 0, 2), pr_id)

    def test_invalid_pr_id_is_validation_error(self):
        with pytest.raises(VersionValidationError):
            encode(SemanticVersion(1, 0, 2), 100)

    def test_out_of_range_version_object(self):
        # bypasses dataclass validation to reach the encoder's own checks
        version = SemanticVersion(1, 0, 0)
        object.__setattr__(version, "patch", 100)
        with pytest.raises(VersionRangeError):
            encode(version, 1)

    def test_distinct_inputs_give_distinct_codes(self):
        versions = [
            SemanticVersion(a, b, c)
            for a in (0, 1, 99)
            for b in (0, 99)
            for c in (0, 1, 99)
        ]
        codes = {}
        for version in versions:
            for pr_id in (0, 1, 50, 99):
                code = encode(version, pr_id)
                assert code not in codes, (version, pr_id, codes.get(code))
                codes[code] = (version, pr_id)

    def test_codes_follow_version_order(self):
        highest_pr = encode(SemanticVersion(1, 0, 2), 99)
        assert highest_pr < encode(SemanticVersion(1, 0, 3), 0)
        last_of_major = encode(SemanticVersion(1, 99, 99), 99)
        assert last_of_major < encode(SemanticVersion(2, 0, 0), 0)


@pytest.mark.short
class TestDecode:
    def test_decode(self):
        assert decode(1000203) == (SemanticVersion(1, 0, 2), 3)
        assert decode(99999999) == (SemanticVersion(99, 99, 99), 99)
        assert decode(0) == (SemanticVersion(0, 0, 0), 0)

    def test_decode_inverts_encode(self):
        version = SemanticVersion(4, 17, 8)
        assert decode(encode(version, 42)) == (version, 42)

    @pytest.mark.parametrize("code", [-1, 100_000_000, "1000203", True])
    def test_decode_invalid(self, code):
        with pytest.raises(VersionRangeError):
            decode(code)


@pytest.mark.short
def test_validate_pr_id():
    assert validate_pr_id(0) == 0
    assert validate_pr_id(99) == 99
    with pytest.raises(VersionRangeError, match="pr_id"):
        validate_pr_id(100)
