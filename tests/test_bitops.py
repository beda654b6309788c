import pytest

from bitops import BitPacker, BitUnpacker
from errors import MalformedInputError


def test_bitpacker_partial_word_truncated_to_needed_bytes():
    bp = BitPacker()
    bp.write_bits(0b1010, 4)
    bp.write_bits(0b11110000, 8)
    out = bp.flush()
    assert out == bytes([0b10101111, 0b00000000])


def test_bitpacker_emits_full_words_big_endian():
    bp = BitPacker()
    bp.write_bits(0x12345678, 32)
    assert bytes(bp.buffer) == b"\x12\x34\x56\x78"
    bp.write_bits(1, 1)
    assert bp.flush() == b"\x12\x34\x56\x78\x80"


def test_bitpacker_word_split_across_writes():
    bp = BitPacker()
    bp.write_bits(0, 30)
    bp.write_bits(0b1111, 4)
    assert bytes(bp.buffer) == b"\x00\x00\x00\x03"
    assert bp.flush() == b"\x00\x00\x00\x03\xc0"


def test_bitpacker_long_code_spans_several_words():
    bp = BitPacker()
    bp.write_code("1" * 70)
    out = bp.flush()
    assert out == b"\xff" * 8 + b"\xfc"


def test_bitpacker_remainder_multiple_of_eight_has_no_padding_byte():
    bp = BitPacker()
    bp.write_bits(0xABCD, 16)
    assert bp.flush() == b"\xab\xcd"


def test_write_zero_bits_and_empty_code_are_noops():
    bp = BitPacker()
    bp.write_bits(0xAA, 8)
    bp.write_bits(0, 0)
    bp.write_code("")
    assert bp.flush() == bytes([0xAA])
    assert BitPacker().flush() == b""


def test_bitunpacker_read_bytes_then_bits():
    data = b"\x07" + b"\x80\x00\x00\x01" + b"\xc0"
    bu = BitUnpacker(data)
    assert bu.read_bytes(1) == b"\x07"
    bits = list(bu.iter_bits())
    assert len(bits) == 40
    assert bits[0] == 1 and bits[31] == 1
    assert sum(bits[1:31]) == 0
    assert bits[32:] == [1, 1, 0, 0, 0, 0, 0, 0]
    assert bu.remaining == 0


def test_bitunpacker_read_bytes_truncated_raises():
    bu = BitUnpacker(b"\x01\x02", pos=1)
    with pytest.raises(MalformedInputError):
        bu.read_bytes(2)


def test_packer_and_unpacker_agree_on_bit_order():
    bp = BitPacker()
    pattern = "1101001" * 9
    bp.write_code(pattern)
    bits = "".join(str(b) for b in BitUnpacker(bp.flush()).iter_bits())
    assert bits.startswith(pattern)
    assert set(bits[len(pattern):]) <= {"0"}
