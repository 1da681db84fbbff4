"""
Unit tests for file lifecycle value objects.
"""

import pytest

from dropvault.domain.errors import ValidationError
from dropvault.domain.file_lifecycle.value_objects import (
    UNKNOWN_FILENAME,
    PolicyTable,
    Tier,
    TierPolicy,
    Visibility,
    blob_name,
    extension_of,
    normalize_filename,
)


class TestTier:
    def test_public_tier_is_public(self):
        assert Tier.PUBLIC.visibility is Visibility.PUBLIC

    def test_user_tier_is_private(self):
        assert Tier.USER.visibility is Visibility.PRIVATE

    def test_for_visibility_round_trips(self):
        for tier in Tier:
            assert Tier.for_visibility(tier.visibility) is tier


class TestTierPolicy:
    def test_valid_policy(self):
        policy = TierPolicy(max_size_bytes=10, expiry_days=1, max_downloads=1)
        assert policy.to_dict() == {"max_size_bytes": 10, "expiry_days": 1, "max_downloads": 1}

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_size_bytes": 0, "expiry_days": 1, "max_downloads": 1},
            {"max_size_bytes": 1, "expiry_days": -1, "max_downloads": 1},
            {"max_size_bytes": 1, "expiry_days": 1, "max_downloads": 0},
            {"max_size_bytes": 1.5, "expiry_days": 1, "max_downloads": 1},
            {"max_size_bytes": True, "expiry_days": 1, "max_downloads": 1},
        ],
    )
    def test_rejects_non_positive_or_non_integer_values(self, kwargs):
        with pytest.raises(ValidationError):
            TierPolicy(**kwargs)

    def test_is_immutable(self):
        policy = TierPolicy(10, 1, 1)
        with pytest.raises(AttributeError):
            policy.max_downloads = 5


class TestPolicyTable:
    def test_lookup_by_tier_and_visibility(self):
        public = TierPolicy(100, 7, 3)
        user = TierPolicy(500, 30, 100)
        table = PolicyTable(public=public, user=user)

        assert table.for_tier(Tier.PUBLIC) is public
        assert table.for_tier(Tier.USER) is user
        assert table.for_visibility(Visibility.PUBLIC) is public
        assert table.for_visibility(Visibility.PRIVATE) is user

    def test_to_dict_keyed_by_tier(self):
        table = PolicyTable(public=TierPolicy(100, 7, 3), user=TierPolicy(500, 30, 100))
        assert table.to_dict() == {
            "public": {"max_size_bytes": 100, "expiry_days": 7, "max_downloads": 3},
            "user": {"max_size_bytes": 500, "expiry_days": 30, "max_downloads": 100},
        }


class TestNormalizeFilename:
    @pytest.mark.parametrize("name", [None, "", "   ", "\t\n"])
    def test_blank_names_fall_back_to_unknown(self, name):
        assert normalize_filename(name) == UNKNOWN_FILENAME == "unknown"

    def test_keeps_real_names_verbatim(self):
        assert normalize_filename(" notes v2.txt") == " notes v2.txt"


class TestExtensionOf:
    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("report.pdf", ".pdf"),
            ("archive.tar.gz", ".gz"),
            ("README", ""),
            ("trailing.", ""),
            (".bashrc", ".bashrc"),
            ("../../etc/passwd", ""),
            ("evil.p/../x", ""),
            ("name.ex\x00e", ""),
            ("photo.JPEG", ".JPEG"),
            ("weird.a b", ""),
            ("dots..", ""),
            ("line.pdf\n", ""),
            ("", ""),
            (None, ""),
        ],
    )
    def test_extension_derivation(self, filename, expected):
        assert extension_of(filename) == expected

    def test_overlong_suffix_is_dropped(self):
        assert extension_of("file." + "x" * 17) == ""
        assert extension_of("file." + "x" * 16) == "." + "x" * 16


def test_blob_name_joins_id_and_extension():
    assert blob_name("abc", ".pdf") == "abc.pdf"
    assert blob_name("abc", "") == "abc"
