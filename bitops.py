import struct
from typing import Iterator

from errors import MalformedInputError

WORD_BITS = 32  #: Payload is packed in 32-bit words
WORD_BYTES = WORD_BITS // 8


class BitPacker:
    """Word-oriented bit-packing writer.

    Accumulates bits MSB-first and emits every completed 32-bit group as a
    big-endian word.

    :ivar buffer: Bytes emitted so far.
    :type buffer: bytearray
    :ivar bit_buffer: Pending bits not yet forming a whole word.
    :type bit_buffer: int
    :ivar bit_count: Number of valid bits in ``bit_buffer`` (0-31 between calls).
    :type bit_count: int
    """

    def __init__(self):
        """Initialize an empty bit packer.

        :returns: None
        :rtype: None
        """
        self.buffer = bytearray()
        self.bit_buffer = 0
        self.bit_count = 0

    def write_bits(self, value: int, nbits: int):
        """Append the lowest ``nbits`` of ``value``, MSB first.

        ``nbits`` is not limited to the word size; long codes are split
        across as many words as they need.

        :param value: Integer whose bits will be written.
        :type value: int
        :param nbits: Number of bits from ``value`` to write.
        :type nbits: int
        :returns: None
        :rtype: None
        """
        if nbits <= 0:
            return
        self.bit_buffer = (self.bit_buffer << nbits) | (value & ((1 << nbits) - 1))
        self.bit_count += nbits
        while self.bit_count >= WORD_BITS:
            self.bit_count -= WORD_BITS
            word = self.bit_buffer >> self.bit_count
            self.buffer += struct.pack(">I", word)
            self.bit_buffer &= (1 << self.bit_count) - 1

    def write_code(self, code: str):
        """Append a prefix code given as a string of ``'0'``/``'1'``.

        :param code: Bit string to append.
        :type code: str
        :returns: None
        :rtype: None
        """
        if code:
            self.write_bits(int(code, 2), len(code))

    def flush(self) -> bytes:
        """Flush leftover bits and return everything written.

        Leftover bits are left-packed into a final word which is cut down to
        the fewest whole bytes that hold them; unused low bits are zero.

        :returns: The packed bytes.
        :rtype: bytes
        """
        if self.bit_count > 0:
            nbytes = (self.bit_count + 7) // 8
            word = self.bit_buffer << (WORD_BITS - self.bit_count)
            self.buffer += struct.pack(">I", word)[:nbytes]
            self.bit_buffer = 0
            self.bit_count = 0
        return bytes(self.buffer)


class BitUnpacker:
    """Length-checked reader over a compressed buffer.

    Serves raw bytes for the header and then bits, word by word, for the
    payload.

    :ivar data: Source buffer.
    :type data: bytes
    :ivar pos: Current byte position in ``data``.
    :type pos: int
    """

    def __init__(self, data: bytes, pos: int = 0):
        """Create an unpacker positioned at ``pos``.

        :param data: Source data to read from.
        :type data: bytes
        :param pos: Starting byte offset.
        :type pos: int
        :returns: None
        :rtype: None
        """
        self.data = data
        self.pos = pos

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self.data) - self.pos

    def read_bytes(self, nbytes: int) -> bytes:
        """Read exactly ``nbytes`` raw bytes.

        :param nbytes: Number of bytes to read.
        :type nbytes: int
        :returns: The next ``nbytes`` bytes.
        :rtype: bytes
        :raises MalformedInputError: If fewer than ``nbytes`` bytes remain.
        """
        if nbytes > self.remaining:
            raise MalformedInputError(
                f"Unexpected end of data: wanted {nbytes} bytes "
                f"at offset {self.pos}, {self.remaining} left"
            )
        result = self.data[self.pos:self.pos + nbytes]
        self.pos += nbytes
        return result

    def iter_bits(self) -> Iterator[int]:
        """Yield the remaining bits, MSB first, one 32-bit word at a time.

        The final word may be 1-3 bytes long; only the bits actually present
        are yielded. ``pos`` advances a whole word (or the final partial
        word) as soon as it is loaded.

        :returns: Iterator over bit values ``0``/``1``.
        :rtype: Iterator[int]
        """
        while self.pos < len(self.data):
            chunk = self.data[self.pos:self.pos + WORD_BYTES]
            self.pos += len(chunk)
            word = int.from_bytes(chunk.ljust(WORD_BYTES, b"\x00"), "big")
            for i in range(len(chunk) * 8):
                yield (word >> (WORD_BITS - 1 - i)) & 1
