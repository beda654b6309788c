import heapq
import itertools
from collections import Counter
from typing import Dict, Iterable, List, NamedTuple, Tuple, Union

MAX_SYMBOLS = 256  #: Byte alphabet size


class FrequencyTable:
    """Occurrence counts for every byte value.

    Built once, either from an input buffer or from header records, and not
    modified afterwards.

    :ivar counts: Count for each symbol ``0..255``.
    :type counts: Tuple[int, ...]
    :ivar distinct: Number of symbols with a non-zero count.
    :type distinct: int
    :ivar total: Sum of all counts.
    :type total: int
    """

    def __init__(self, counts: Iterable[int]):
        """Create a table from a sequence of 256 counts.

        :param counts: Per-symbol counts, indexed by symbol.
        :type counts: Iterable[int]
        :raises ValueError: If there are not exactly 256 non-negative counts.
        """
        counts = tuple(counts)
        if len(counts) != MAX_SYMBOLS:
            raise ValueError(f"Expected {MAX_SYMBOLS} counts, got {len(counts)}")
        if any(c < 0 for c in counts):
            raise ValueError("Counts must be non-negative")
        self.counts = counts
        self.distinct = sum(1 for c in counts if c)
        self.total = sum(counts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "FrequencyTable":
        """Count symbol occurrences in ``data``.

        :param data: Input buffer.
        :type data: bytes
        :returns: The frequency table; all zeros for empty input.
        :rtype: FrequencyTable
        """
        counter = Counter(data)
        return cls(counter.get(sym, 0) for sym in range(MAX_SYMBOLS))

    @classmethod
    def from_records(cls, records: Iterable[Tuple[int, int]]) -> "FrequencyTable":
        """Build a table from ``(symbol, count)`` pairs.

        Repeated symbols have their counts summed.

        :param records: Pairs as read from a header.
        :type records: Iterable[Tuple[int, int]]
        :returns: The accumulated frequency table.
        :rtype: FrequencyTable
        """
        counts = [0] * MAX_SYMBOLS
        for symbol, count in records:
            counts[symbol] += count
        return cls(counts)

    def items(self) -> List[Tuple[int, int]]:
        """Non-zero ``(symbol, count)`` pairs in ascending symbol order."""
        return [(sym, c) for sym, c in enumerate(self.counts) if c]

    def __getitem__(self, symbol: int) -> int:
        return self.counts[symbol]

    def __eq__(self, other):
        if not isinstance(other, FrequencyTable):
            return NotImplemented
        return self.counts == other.counts

    def __repr__(self):
        return f"FrequencyTable({dict(self.items())!r})"


class HuffmanNode:
    """Base class of Huffman tree nodes.

    :ivar freq: Frequency (weight) of the subtree rooted at this node.
    :type freq: int
    """

    is_leaf = False
    symbol = 0  #: Ordering symbol; internal nodes sort as symbol 0

    def __init__(self, freq: int):
        self.freq = freq


class HuffmanLeaf(HuffmanNode):
    """Leaf holding a byte value.

    :ivar symbol: The byte value stored at this leaf.
    :type symbol: int
    """

    is_leaf = True

    def __init__(self, symbol: int, freq: int):
        super().__init__(freq)
        self.symbol = symbol

    def __repr__(self):
        return f"HuffmanLeaf({self.symbol!r}, {self.freq!r})"


class HuffmanInternal(HuffmanNode):
    """Internal node with exactly two children.

    Its frequency is always the sum of the children's frequencies.

    :ivar left: Child reached with bit ``0``.
    :type left: HuffmanNode
    :ivar right: Child reached with bit ``1``.
    :type right: HuffmanNode
    """

    def __init__(self, left: HuffmanNode, right: HuffmanNode):
        super().__init__(left.freq + right.freq)
        self.left = left
        self.right = right

    def __repr__(self):
        return f"HuffmanInternal({self.left!r}, {self.right!r})"


class EmptyTree(NamedTuple):
    """No symbols at all; nothing to encode."""


class DegenerateTree(NamedTuple):
    """Exactly one distinct symbol, repeated ``count`` times."""

    symbol: int
    count: int


class HuffmanTree(NamedTuple):
    """Regular tree with at least two leaves."""

    root: HuffmanInternal


TreeResult = Union[EmptyTree, DegenerateTree, HuffmanTree]


def comes_before(a: HuffmanNode, b: HuffmanNode) -> bool:
    """Return whether ``a`` orders strictly before ``b``.

    Lower frequency first; equal frequencies fall back to the lower symbol,
    with internal nodes counting as symbol 0.

    :param a: First node.
    :type a: HuffmanNode
    :param b: Second node.
    :type b: HuffmanNode
    :returns: ``True`` if ``a`` comes before ``b``.
    :rtype: bool
    """
    return a.freq < b.freq or (a.freq == b.freq and a.symbol < b.symbol)


def build_tree(table: FrequencyTable) -> TreeResult:
    """Build the Huffman tree for ``table``.

    Nodes are kept in ``comes_before`` order. The two lowest are merged
    (lower one on the left) and the result is queued ahead of every node
    it does not come after. The heap key ``(freq, symbol, -seq)`` gives
    exactly that order: among equal ``(freq, symbol)`` the newest node is
    taken first.

    :param table: Symbol frequencies.
    :type table: FrequencyTable
    :returns: ``EmptyTree``, ``DegenerateTree`` or ``HuffmanTree``.
    :rtype: TreeResult
    """
    items = table.items()
    if not items:
        return EmptyTree()
    if len(items) == 1:
        symbol, count = items[0]
        return DegenerateTree(symbol, count)

    seq = itertools.count()
    heap = []
    for symbol, freq in items:
        leaf = HuffmanLeaf(symbol, freq)
        heap.append((leaf.freq, leaf.symbol, -next(seq), leaf))
    heapq.heapify(heap)

    while len(heap) > 1:
        a = heapq.heappop(heap)[-1]
        b = heapq.heappop(heap)[-1]
        if comes_before(b, a):
            a, b = b, a
        merged = HuffmanInternal(a, b)
        heapq.heappush(heap, (merged.freq, merged.symbol, -next(seq), merged))

    return HuffmanTree(heap[0][-1])


def build_codes(root: HuffmanNode) -> Dict[int, str]:
    """Derive the code table by walking the tree.

    :param root: Root of a tree with at least two leaves.
    :type root: HuffmanNode
    :returns: Mapping from symbol to its bit string.
    :rtype: Dict[int, str]
    :raises ValueError: If ``root`` is a bare leaf (no code can be formed).
    """
    if root.is_leaf:
        raise ValueError("Cannot build codes for a single-leaf tree")
    codes: Dict[int, str] = {}
    _collect_codes(root, "", codes)
    return codes


def _collect_codes(node: HuffmanNode, prefix: str, codes: Dict[int, str]):
    if node.is_leaf:
        codes[node.symbol] = prefix
    else:
        _collect_codes(node.left, prefix + "0", codes)
        _collect_codes(node.right, prefix + "1", codes)
