"""Frequency header serialization.

Layout (big-endian)::

    [1 byte]       N - 1, N = number of records (1..256)
    [N x 5 bytes]  symbol (uint8), frequency (uint32)
"""
import struct
from typing import Tuple

from bitops import BitUnpacker
from huffman import FrequencyTable

RECORD = struct.Struct(">BI")
MAX_FREQUENCY = 0xFFFFFFFF


def write_header(table: FrequencyTable) -> bytes:
    """Serialize the non-zero entries of ``table``.

    :param table: Table with between 1 and 256 distinct symbols.
    :type table: FrequencyTable
    :returns: Header bytes.
    :rtype: bytes
    :raises ValueError: If the table is empty or a count exceeds 32 bits.
    """
    items = table.items()
    if not items:
        raise ValueError("Cannot write a header for an empty frequency table")
    out = bytearray(struct.pack(">B", len(items) - 1))
    for symbol, freq in items:
        if freq > MAX_FREQUENCY:
            raise ValueError(
                f"Frequency {freq} of symbol {symbol} does not fit in 32 bits"
            )
        out += RECORD.pack(symbol, freq)
    return bytes(out)


def read_header(reader: BitUnpacker) -> Tuple[FrequencyTable, int]:
    """Read a header from ``reader`` and leave it positioned at the payload.

    :param reader: Unpacker positioned at the start of a header.
    :type reader: BitUnpacker
    :returns: Reconstructed table and total symbol count.
    :rtype: Tuple[FrequencyTable, int]
    :raises MalformedInputError: If the buffer ends inside the header.
    """
    count = reader.read_bytes(1)[0] + 1
    raw = reader.read_bytes(count * RECORD.size)
    table = FrequencyTable.from_records(RECORD.iter_unpack(raw))
    return table, table.total


def parse_header(data: bytes) -> Tuple[FrequencyTable, int, int]:
    """Parse the header at the start of ``data``.

    :param data: Compressed buffer.
    :type data: bytes
    :returns: Table, total symbol count and header size in bytes.
    :rtype: Tuple[FrequencyTable, int, int]
    :raises MalformedInputError: If the buffer ends inside the header.
    """
    reader = BitUnpacker(data)
    table, total = read_header(reader)
    return table, total, reader.pos
