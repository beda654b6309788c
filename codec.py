from typing import Callable, Optional

from bitops import BitPacker, BitUnpacker
from errors import MalformedInputError
from header import read_header, write_header
from huffman import (
    DegenerateTree,
    EmptyTree,
    FrequencyTable,
    build_codes,
    build_tree,
)

ProgressCallback = Callable[[int, int], None]

PROGRESS_STEP = 1 << 16  #: Symbols between two progress reports


def _report(on_progress: Optional[ProgressCallback], done: int, total: int):
    """Invoke a progress callback, ignoring any error it raises."""
    if on_progress is None:
        return
    try:
        on_progress(done, total)
    except Exception:
        pass


class Compressor:
    """Byte-oriented Huffman compressor.

    Output is a frequency header followed by the codes packed in 32-bit
    big-endian words. Empty input compresses to nothing and input with a
    single distinct byte to the header alone.
    """

    def compress(
        self,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> bytes:
        """Compress ``data``.

        :param data: Input bytes to compress.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting input bytes encoded so far.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Compressed byte stream.
        :rtype: bytes
        :raises ValueError: If a byte occurs more than 2**32 - 1 times.
        """
        table = FrequencyTable.from_bytes(data)
        tree = build_tree(table)

        if isinstance(tree, EmptyTree):
            _report(on_progress, 0, 0)
            return b""

        header = write_header(table)
        if isinstance(tree, DegenerateTree):
            _report(on_progress, len(data), len(data))
            return header

        codes = build_codes(tree.root)
        lookup = [None] * 256
        for symbol, code in codes.items():
            lookup[symbol] = (int(code, 2), len(code))

        packer = BitPacker()
        total = len(data)
        for i, byte in enumerate(data):
            value, nbits = lookup[byte]
            packer.write_bits(value, nbits)
            if i % PROGRESS_STEP == 0:
                _report(on_progress, i, total)
        _report(on_progress, total, total)

        return header + packer.flush()


class Decompressor:
    """Inverse of :class:`Compressor`."""

    def decompress(
        self,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> bytes:
        """Decompress data produced by :meth:`Compressor.compress`.

        Decoding stops after exactly as many symbols as the header counts;
        zero padding in the last byte is never read as a symbol.

        :param data: Compressed byte stream.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting output bytes recovered so far.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Original uncompressed bytes.
        :rtype: bytes
        :raises MalformedInputError: If the header or payload is truncated,
            or bytes are left over after the last symbol.
        """
        if not data:
            return b""

        reader = BitUnpacker(data)
        table, total = read_header(reader)
        tree = build_tree(table)

        if isinstance(tree, (EmptyTree, DegenerateTree)):
            if reader.remaining:
                raise MalformedInputError(
                    f"{reader.remaining} unexpected payload bytes after a "
                    f"header with {table.distinct} distinct symbols"
                )
            _report(on_progress, total, total)
            if isinstance(tree, EmptyTree):
                return b""
            return bytes([tree.symbol]) * tree.count

        payload_start = reader.pos
        payload_len = reader.remaining
        root = tree.root
        node = root
        out = bytearray()
        bits_read = 0
        bits = reader.iter_bits()

        while len(out) < total:
            bit = next(bits, None)
            if bit is None:
                raise MalformedInputError(
                    f"Payload ended after {len(out)} of {total} symbols"
                )
            bits_read += 1
            node = node.right if bit else node.left
            if node.is_leaf:
                out.append(node.symbol)
                node = root
                if len(out) % PROGRESS_STEP == 0:
                    _report(on_progress, len(out), total)

        used = (bits_read + 7) // 8
        if payload_len > used:
            raise MalformedInputError(
                f"{payload_len - used} trailing bytes after payload "
                f"at offset {payload_start + used}"
            )

        _report(on_progress, total, total)
        return bytes(out)


def compress(data: bytes) -> bytes:
    """Compress ``data`` with a fresh :class:`Compressor`."""
    return Compressor().compress(data)


def decompress(data: bytes) -> bytes:
    """Decompress ``data`` with a fresh :class:`Decompressor`."""
    return Decompressor().decompress(data)
