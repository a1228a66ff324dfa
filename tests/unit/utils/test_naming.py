"""
Unit tests for naming.py - unique temporary name generation.
"""

import os

import pytest

from tmpdir_manager.utils.naming import (
    PROCESS_FINGERPRINT,
    get_temp_name,
    make_fingerprint,
    next_counter,
    to_base36,
)


class TestBase36:
    """Test suite for base 36 formatting."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, "0"), (9, "9"), (10, "a"), (35, "z"), (36, "10"), (1295, "zz"), (46656, "1000")],
    )
    def test_to_base36(self, value, expected):
        assert to_base36(value) == expected

    def test_negative_value_rejected(self):
        with pytest.raises(ValueError):
            to_base36(-1)


class TestGetTempName:
    """Test suite for get_temp_name."""

    def test_names_are_unique(self):
        """Test that repeated calls never return the same name."""
        names = [get_temp_name() for _ in range(2000)]
        assert len(set(names)) == len(names)

    def test_names_unique_across_prefixes(self):
        names = [get_temp_name("a") for _ in range(100)] + [get_temp_name() for _ in range(100)]
        assert len(set(names)) == len(names)

    def test_name_without_prefix(self):
        name = get_temp_name()
        assert name.startswith(f"{PROCESS_FINGERPRINT}-")

    def test_name_with_prefix(self):
        name = get_temp_name("build")
        assert name.startswith(f"build-{PROCESS_FINGERPRINT}-")

    def test_counter_is_last_component(self):
        first = get_temp_name()
        second = get_temp_name()
        assert int(second.rsplit("-", 1)[1], 36) > int(first.rsplit("-", 1)[1], 36)

    def test_shares_counter_with_allocations(self):
        """Test that names and allocations draw from one counter."""
        before = int(next_counter(), 36)
        name = get_temp_name()
        assert int(name.rsplit("-", 1)[1], 36) == before + 1


class TestFingerprint:
    """Test suite for the process fingerprint."""

    def test_fingerprint_contains_pid(self):
        assert PROCESS_FINGERPRINT.split("-")[0] == to_base36(os.getpid())

    def test_make_fingerprint(self):
        assert make_fingerprint(36, 37) == "10-11"

    def test_different_runs_differ(self):
        """Test that two runs with the same PID still get distinct fingerprints."""
        assert make_fingerprint(1234, 1_700_000_000_000) != make_fingerprint(
            1234, 1_700_000_000_001
        )
