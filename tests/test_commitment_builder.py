"""Tests for the commitment builder — encoding, hashing and regression vectors."""

import pytest
from datetime import datetime, timezone

from gamecommit.crypto.commitment_builder import (
    U32_MAX,
    EncodingError,
    build_commitment,
    build_record,
    digest_hex,
    encode_preimage,
    encode_u32,
    parse_digest,
    verify_commitment,
)
from gamecommit.crypto.salt import random_salt, text_salt
from gamecommit.models.commitment import CommitmentRecord, GameMode


ZERO_SALT = b"\x00" * 32
CASE_SALT = text_salt("meridian_manor_salt_v1")

# keccak256(BE32(500) || BE32(300) || 32 zero bytes)
SCENE_VECTOR = "48359e8fb9897c38e69c2b59c6259dac9ec7f45dfcbd1b15668c6bb3af3bbb82"
# keccak256(BE32(1) || BE32(1) || BE32(1) || "meridian_manor_salt_v1" zero-padded)
CASE_VECTOR = "fea998b908d18c8d9c7ab1424c1395b0ca32453fd0453da4fee1d7ab628d4ed5"


def _flip(data: bytes, bit: int) -> bytes:
    buf = bytearray(data)
    buf[bit // 8] ^= 1 << (bit % 8)
    return bytes(buf)


class TestEncoding:
    def test_big_endian(self) -> None:
        assert encode_u32(500) == b"\x00\x00\x01\xf4"
        assert encode_u32(300) == b"\x00\x00\x01\x2c"

    def test_bounds_accepted(self) -> None:
        assert encode_u32(0) == b"\x00\x00\x00\x00"
        assert encode_u32(U32_MAX) == b"\xff\xff\xff\xff"

    def test_overflow_rejected(self) -> None:
        with pytest.raises(EncodingError, match="out of u32 range"):
            encode_u32(2**32)

    def test_negative_rejected(self) -> None:
        with pytest.raises(EncodingError, match="out of u32 range"):
            encode_u32(-1)

    def test_bool_rejected(self) -> None:
        with pytest.raises(EncodingError, match="integer"):
            encode_u32(True)

    def test_scene_preimage_layout(self) -> None:
        preimage = encode_preimage([500, 300], ZERO_SALT)
        assert len(preimage) == 40
        assert preimage.hex() == "000001f4" + "0000012c" + "00" * 32

    def test_case_preimage_layout(self) -> None:
        preimage = encode_preimage([1, 1, 1], CASE_SALT)
        assert len(preimage) == 44
        assert preimage[:12] == b"\x00\x00\x00\x01" * 3
        assert preimage[12:] == CASE_SALT

    def test_bad_salt_length_is_encoding_error(self) -> None:
        with pytest.raises(EncodingError, match="32 bytes"):
            encode_preimage([1], b"short")


class TestBuildCommitment:
    def test_scene_regression_vector(self) -> None:
        assert build_commitment([500, 300], ZERO_SALT).hex() == SCENE_VECTOR

    def test_case_regression_vector(self) -> None:
        assert build_commitment([1, 1, 1], CASE_SALT).hex() == CASE_VECTOR

    def test_digest_is_32_bytes(self) -> None:
        assert len(build_commitment([7, 8], random_salt())) == 32

    def test_deterministic(self) -> None:
        salt = random_salt()
        assert build_commitment([3, 4, 5], salt) == build_commitment([3, 4, 5], salt)

    def test_order_matters(self) -> None:
        assert build_commitment([500, 300], ZERO_SALT) != build_commitment([300, 500], ZERO_SALT)

    def test_fact_bit_flips_change_digest(self) -> None:
        base = build_commitment([500, 300], ZERO_SALT)
        for bit in range(32):
            assert build_commitment([500 ^ (1 << bit), 300], ZERO_SALT) != base
            assert build_commitment([500, 300 ^ (1 << bit)], ZERO_SALT) != base

    def test_salt_bit_flips_change_digest(self) -> None:
        base = build_commitment([1, 1, 1], CASE_SALT)
        for bit in range(256):
            assert build_commitment([1, 1, 1], _flip(CASE_SALT, bit)) != base

    def test_range_checked_before_hashing(self, monkeypatch) -> None:
        import gamecommit.crypto.commitment_builder as cb

        def _no_hash(data: bytes) -> bytes:
            raise AssertionError("hash must not be reached")

        monkeypatch.setattr(cb, "keccak256", _no_hash)
        with pytest.raises(EncodingError):
            cb.build_commitment([1, 2**32], ZERO_SALT)

    def test_extreme_values_hash(self) -> None:
        low = build_commitment([0, 0], ZERO_SALT)
        high = build_commitment([U32_MAX, U32_MAX], ZERO_SALT)
        assert low != high


class TestHexAndVerify:
    def test_digest_hex_lowercase(self) -> None:
        text = digest_hex(build_commitment([500, 300], ZERO_SALT))
        assert text == SCENE_VECTOR
        assert len(text) == 64

    def test_digest_hex_rejects_wrong_length(self) -> None:
        with pytest.raises(EncodingError):
            digest_hex(b"\x00" * 31)

    def test_parse_digest_accepts_prefix(self) -> None:
        assert parse_digest("0x" + SCENE_VECTOR).hex() == SCENE_VECTOR

    def test_verify_matches(self) -> None:
        assert verify_commitment([1, 1, 1], CASE_SALT, CASE_VECTOR)
        assert verify_commitment([1, 1, 1], CASE_SALT, bytes.fromhex(CASE_VECTOR))

    def test_verify_wrong_suspect(self) -> None:
        assert not verify_commitment([2, 1, 1], CASE_SALT, CASE_VECTOR)

    def test_verify_wrong_salt(self) -> None:
        assert not verify_commitment([1, 1, 1], text_salt("different_salt"), CASE_VECTOR)


class TestBuildRecord:
    def test_scene_record(self) -> None:
        ts = datetime(2026, 2, 13, 13, 0, tzinfo=timezone.utc)
        record = build_record(GameMode.SCENE, 1, [500, 300], ZERO_SALT, tolerance=150, timestamp_utc=ts)
        assert isinstance(record, CommitmentRecord)
        assert record.digest_hex == SCENE_VECTOR
        assert record.facts == (500, 300)
        assert record.tolerance == 150
        assert record.created_utc == "2026-02-13T13:00:00Z"
        assert record.named_facts() == {"target_x": 500, "target_y": 300}

    def test_case_record(self) -> None:
        record = build_record(GameMode.CASE, 1, (1, 1, 1), CASE_SALT)
        assert record.digest_hex == CASE_VECTOR
        assert record.tolerance is None
        assert list(record.named_facts()) == ["suspect_id", "weapon_id", "room_id"]

    def test_arity_enforced(self) -> None:
        with pytest.raises(EncodingError, match="take 3 facts"):
            build_record(GameMode.CASE, 1, (1, 1), CASE_SALT)

    def test_scene_requires_tolerance(self) -> None:
        with pytest.raises(EncodingError, match="require a tolerance"):
            build_record(GameMode.SCENE, 1, (500, 300), ZERO_SALT)

    def test_case_rejects_tolerance(self) -> None:
        with pytest.raises(EncodingError, match="do not take a tolerance"):
            build_record(GameMode.CASE, 1, (1, 1, 1), CASE_SALT, tolerance=5)

    def test_instance_id_range(self) -> None:
        with pytest.raises(EncodingError, match="scene_id"):
            build_record(GameMode.SCENE, 2**32, (1, 1), ZERO_SALT, tolerance=1)

    def test_record_is_immutable(self) -> None:
        record = build_record(GameMode.CASE, 1, (1, 1, 1), CASE_SALT)
        with pytest.raises(AttributeError):
            record.facts = (2, 2, 2)  # type: ignore[misc]
