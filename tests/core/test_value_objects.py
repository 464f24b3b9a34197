"""Tests for core value objects."""

import base64
import pytest

from neo_uploads.core.value_objects import BlockId, Checksum
from neo_uploads.core.value_objects.block_id import MAX_SEQUENCE_NUMBER


class TestBlockId:
    """Test deterministic block ids."""

    def test_encoded_form(self):
        assert BlockId(0).value == base64.b64encode(b"block-0000000000").decode()
        assert BlockId(42).value == base64.b64encode(b"block-0000000042").decode()

    def test_same_sequence_same_id(self):
        assert BlockId(7) == BlockId(7)
        assert BlockId(7).value == BlockId(7).value

    def test_ids_have_equal_length(self):
        numbers = [0, 9, 10, 99999, MAX_SEQUENCE_NUMBER]
        values = [BlockId(n).value for n in numbers]

        assert len(set(len(value) for value in values)) == 1
        assert [BlockId.from_string(value).sequence_number for value in values] == numbers

    def test_parse_encoded_form(self):
        assert BlockId.from_string(BlockId(123).value) == BlockId(123)
        assert str(BlockId(123)) == BlockId(123).value

    @pytest.mark.parametrize("sequence_number", [-1, MAX_SEQUENCE_NUMBER + 1, True, "1"])
    def test_invalid_sequence_number(self, sequence_number):
        with pytest.raises(ValueError):
            BlockId(sequence_number)

    @pytest.mark.parametrize("value", [
        "not base64!",
        base64.b64encode(b"chunk-0000000001").decode(),
        base64.b64encode(b"block-1").decode(),
        base64.b64encode(b"block-00000000xx").decode(),
    ])
    def test_invalid_encoded_form(self, value):
        with pytest.raises(ValueError):
            BlockId.from_string(value)


class TestChecksum:
    """Test the client-declared checksum value object."""

    def test_algorithm_normalized(self):
        checksum = Checksum(" SHA1 ", b"\x01\x02")

        assert checksum.algorithm == "sha1"
        assert checksum.expected == b"\x01\x02"

    def test_header_form(self):
        checksum = Checksum.from_header("md5 AQID")

        assert checksum == Checksum("md5", b"\x01\x02\x03")
        assert checksum.to_header() == "md5 AQID"

    @pytest.mark.parametrize("header", ["md5", "md5 AQID extra", "md5 !!!", " AQID"])
    def test_invalid_header(self, header):
        with pytest.raises(ValueError):
            Checksum.from_header(header)

    def test_empty_algorithm_rejected(self):
        with pytest.raises(ValueError):
            Checksum("", b"\x00")

    def test_digest_must_be_bytes(self):
        with pytest.raises(ValueError):
            Checksum("md5", "abcd")
