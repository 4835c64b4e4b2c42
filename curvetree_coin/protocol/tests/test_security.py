"""
⚠️ DRAFT — requires crypto review before production use

Unit tests for randomness and hashing helpers.

Tests randomness, hash-to-scalar, derivation and constant-time comparison.
"""

import os

import pytest

from curvetree_coin.protocol import security
from curvetree_coin.protocol.config import PALLAS_P, VESTA_P


class TestRandomnessSource:
    """Test cryptographically secure randomness source."""

    def test_init(self):
        rng = security.RandomnessSource()
        assert rng._pid == os.getpid()
        assert rng._rng is not None

    def test_get_random_scalar(self):
        rng = security.RandomnessSource()
        scalar = rng.get_random_scalar(VESTA_P)
        assert 0 <= scalar < VESTA_P
        assert isinstance(scalar, int)

    def test_get_random_nonzero_scalar(self):
        rng = security.RandomnessSource()
        values = [rng.get_random_nonzero_scalar(3) for _ in range(50)]
        assert all(v in (1, 2) for v in values)

    def test_invalid_bounds(self):
        rng = security.RandomnessSource()
        with pytest.raises(ValueError):
            rng.get_random_scalar(1)
        with pytest.raises(ValueError):
            rng.get_random_nonzero_scalar(2)

    def test_get_random_bytes(self):
        rng = security.RandomnessSource()
        random_bytes = rng.get_random_bytes(32)
        assert len(random_bytes) == 32
        assert isinstance(random_bytes, bytes)

    def test_fork_detection(self):
        """Test fork detection reinitializes RNG."""
        rng = security.RandomnessSource()
        original_pid = rng._pid

        # Simulate fork by changing PID
        rng._pid = original_pid + 1

        rng.get_random_scalar(1000)
        assert rng._pid == os.getpid()

    def test_different_instances_produce_different_values(self):
        rng1 = security.RandomnessSource()
        rng2 = security.RandomnessSource()
        values1 = [rng1.get_random_scalar(2**128) for _ in range(10)]
        values2 = [rng2.get_random_scalar(2**128) for _ in range(10)]
        assert values1 != values2


class TestHashToScalar:
    """Test hash-to-scalar function."""

    def test_in_range(self):
        scalar = security.hash_to_scalar(b"test data", PALLAS_P)
        assert 0 <= scalar < PALLAS_P

    def test_deterministic(self):
        assert security.hash_to_scalar(b"x", VESTA_P, b"D") == security.hash_to_scalar(
            b"x", VESTA_P, b"D"
        )

    def test_domain_separation(self):
        scalar1 = security.hash_to_scalar(b"test data", VESTA_P, b"DOMAIN_1")
        scalar2 = security.hash_to_scalar(b"test data", VESTA_P, b"DOMAIN_2")
        assert scalar1 != scalar2

    def test_length_prefix_prevents_boundary_shift(self):
        """Moving bytes between domain and data changes the output."""
        scalar1 = security.hash_to_scalar(b"BC", VESTA_P, b"A")
        scalar2 = security.hash_to_scalar(b"C", VESTA_P, b"AB")
        assert scalar1 != scalar2

    def test_uses_wide_digest(self):
        """Reduction of a 512-bit digest exceeds any 256-bit truncation."""
        values = [security.hash_to_scalar(bytes([i]), 2**300) for i in range(1, 20)]
        assert any(v >= 2**256 for v in values)

    def test_empty_data_raises_error(self):
        with pytest.raises(ValueError, match="Data cannot be empty"):
            security.hash_to_scalar(b"", 1000)

    def test_invalid_max_value_raises_error(self):
        with pytest.raises(ValueError, match="max_value must be > 1"):
            security.hash_to_scalar(b"data", 1)

    def test_invalid_data_type_raises_error(self):
        with pytest.raises(TypeError, match="data must be bytes"):
            security.hash_to_scalar("not bytes", 1000)

    def test_invalid_domain_sep_type_raises_error(self):
        with pytest.raises(TypeError, match="domain_sep must be bytes"):
            security.hash_to_scalar(b"data", 1000, "not bytes")


class TestDeriveBytes:
    """Test deterministic derivation blocks."""

    def test_length_and_determinism(self):
        block = security.derive_bytes(b"label", 0)
        assert len(block) == 64
        assert block == security.derive_bytes(b"label", 0)

    def test_counter_changes_output(self):
        assert security.derive_bytes(b"label", 0) != security.derive_bytes(b"label", 1)


class TestConstantTimeCompare:
    """Test constant-time comparison."""

    def test_equal(self):
        assert security.constant_time_compare(b"abc", b"abc")

    def test_not_equal(self):
        assert not security.constant_time_compare(b"abc", b"abd")
        assert not security.constant_time_compare(b"abc", b"ab")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
