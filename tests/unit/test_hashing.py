"""
Hashing Unit Tests
Tests for core/crypto/hashing.py

Tests:
- keccak256 known values
- sorted-pair hashing is commutative
- to_hex/from_hex round trip and validation
- address normalization
"""
import pytest
from eth_utils import to_checksum_address

from core.crypto.hashing import (
    ZERO_ADDRESS,
    ZERO_HASH,
    address_bytes,
    from_hex,
    hash_pair_sorted,
    keccak256,
    normalize_address,
    to_bytes32,
    to_hex,
)


class TestKeccak256:
    """Tests for keccak256()."""

    def test_empty_input_known_value(self):
        """keccak256 of empty bytes is the well-known Ethereum constant."""
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_not_nist_sha3(self):
        """keccak256 differs from NIST SHA3-256 (which pads differently)."""
        import hashlib
        assert keccak256(b"") != hashlib.sha3_256(b"").digest()

    def test_digest_length(self):
        assert len(keccak256(b"anything")) == 32


class TestHashPairSorted:
    """Tests for hash_pair_sorted()."""

    def test_commutative(self):
        a = keccak256(b"a")
        b = keccak256(b"b")
        assert hash_pair_sorted(a, b) == hash_pair_sorted(b, a)

    def test_smaller_digest_first(self):
        low = b"\x00" * 31 + b"\x01"
        high = b"\xff" * 32
        assert hash_pair_sorted(high, low) == keccak256(low + high)

    def test_equal_children(self):
        a = keccak256(b"same")
        assert hash_pair_sorted(a, a) == keccak256(a + a)


class TestHexHelpers:
    """Tests for to_hex/from_hex/to_bytes32."""

    def test_round_trip(self):
        data = bytes.fromhex("deadbeef")
        assert to_hex(data) == "0xdeadbeef"
        assert from_hex("0xdeadbeef") == data

    def test_from_hex_requires_prefix(self):
        with pytest.raises(ValueError, match="0x"):
            from_hex("deadbeef")

    def test_from_hex_rejects_odd_length(self):
        with pytest.raises(ValueError, match="even length"):
            from_hex("0xabc")

    def test_from_hex_rejects_bad_chars(self):
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex("0xzz")

    def test_to_bytes32_accepts_hex_and_bytes(self):
        assert to_bytes32("0x" + "00" * 32) == ZERO_HASH
        assert to_bytes32(ZERO_HASH) == ZERO_HASH

    def test_to_bytes32_rejects_wrong_length(self):
        with pytest.raises(ValueError, match="32 bytes"):
            to_bytes32(b"\x00" * 31)


class TestAddresses:
    """Tests for normalize_address/address_bytes."""

    def test_lowercase_is_checksummed(self):
        raw = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
        assert normalize_address(raw) == to_checksum_address(raw)

    def test_raw_bytes_accepted(self):
        raw = bytes(range(20))
        assert address_bytes(normalize_address(raw)) == raw

    def test_zero_address(self):
        assert normalize_address("0x" + "00" * 20) == ZERO_ADDRESS

    def test_invalid_addresses_rejected(self):
        for bad in ["0x123", "not an address", b"\x00" * 19, 42]:
            with pytest.raises(ValueError):
                normalize_address(bad)
