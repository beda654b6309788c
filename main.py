import argparse
import sys

from typing import Dict, List, Optional

from codec import Compressor, Decompressor
from errors import MalformedInputError
from huffman import FrequencyTable, HuffmanTree, build_codes, build_tree

STDIO = "-"  #: Path meaning standard input/output


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="hufpack",
        description="Byte-oriented Huffman compressor",
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    encode = subparsers.add_parser(
        "encode", aliases=["e"], help="Compress a file"
    )
    encode.add_argument("input", help="File to compress")
    encode.add_argument(
        "output",
        nargs="?",
        default=STDIO,
        help="Compressed output file (default: standard output)",
    )
    encode.add_argument(
        "-d",
        "--dump",
        action="store_true",
        help="Print the symbol counts and Huffman codes",
    )

    decode = subparsers.add_parser(
        "decode", aliases=["d"], help="Decompress a file"
    )
    decode.add_argument(
        "input",
        nargs="?",
        default=STDIO,
        help="Compressed input file, '-' for standard input (default)",
    )
    decode.add_argument(
        "output",
        nargs="?",
        default=STDIO,
        help="Output file, '-' for standard output (default)",
    )

    for sub in (encode, decode):
        sub.add_argument(
            "-P",
            "--no-progress",
            action="store_true",
            help="Hide the progress line",
        )
        sub.add_argument(
            "-s",
            "--stats",
            action="store_true",
            help="Print sizes and compression ratio",
        )

    return parser


def _read_input(path: str) -> bytes:
    """Read a whole file, or standard input for ``-``.

    :param path: Source path.
    :type path: str
    :returns: File contents.
    :rtype: bytes
    :raises OSError: If the file cannot be read.
    """
    if path == STDIO:
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def _write_output(path: str, data: bytes) -> None:
    """Write ``data`` to a file, or standard output for ``-``.

    :param path: Destination path.
    :type path: str
    :param data: Bytes to write.
    :type data: bytes
    :returns: None
    :rtype: None
    :raises OSError: If the file cannot be written.
    """
    if path == STDIO:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    with open(path, "wb") as f:
        f.write(data)


def _print_progress(line: str) -> None:
    """Render and flush a single progress line in-place (carriage return).

    Progress goes to stderr since stdout may carry the data.

    :param line: The textual progress line to display.
    :type line: str
    :returns: None
    :rtype: None
    """
    sys.stderr.write("\r" + line)
    sys.stderr.flush()


def _end_progress() -> None:
    sys.stderr.write("\n")
    sys.stderr.flush()


def _fmt_pct(done: int, total: int) -> str:
    """Format a completion percentage string like ``12.34%``.

    :param done: Units completed.
    :type done: int
    :param total: Total units to complete.
    :type total: int
    :returns: Percentage.
    :rtype: str
    """
    if total <= 0:
        return "0%"
    pct = 100.0 * (done / float(total))
    return f"{pct:6.2f}%"


def _fmt_bytes(n: int) -> str:
    """Format a byte count into a human-readable string.

    :param n: Number of bytes.
    :type n: int
    :returns: Human-readable string.
    :rtype: str
    """
    for unit in ['', 'Ki', 'Mi', 'Gi', 'Ti']:
        if abs(n) < 1024:
            return f"{n:.2f} {unit}B"
        n /= 1024
    return f"{n:.2f} PiB"


def _fmt_symbol(symbol: int) -> str:
    """Show printable ASCII bytes quoted, anything else as a number."""
    if 0x20 < symbol < 0x7F:
        return f"'{chr(symbol)}'"
    return f"{symbol:3d}"


class Progress:
    """Callable progress reporter for one codec run.

    Redraws only when the whole-percent value changes.

    :ivar label: Action label (e.g. "Encoding" or "Decoding").
    :type label: str
    :ivar path: Path displayed next to the percentage.
    :type path: str
    """

    def __init__(self, label: str, path: str) -> None:
        self.label = label
        self.path = path
        self._last_reported = -1

    def __call__(self, done: int, total: int) -> None:
        """Update the progress display.

        :param done: Symbols processed so far.
        :type done: int
        :param total: Total symbols.
        :type total: int
        :returns: None
        :rtype: None
        """
        if total <= 0:
            return
        percent_bucket = int((done * 100) / total)
        if percent_bucket == self._last_reported:
            return
        self._last_reported = percent_bucket
        _print_progress(f"{self.label} {self.path}  {_fmt_pct(done, total)}")


def _display_name(path: str, stream: str) -> str:
    return f"<{stream}>" if path == STDIO else path


def _print_stats(original: int, compressed: int) -> None:
    """Print size before/after compression and the ratio to stderr.

    :param original: Uncompressed size in bytes.
    :type original: int
    :param compressed: Compressed size in bytes.
    :type compressed: int
    :returns: None
    :rtype: None
    """
    print("Size before compression: ", _fmt_bytes(original), file=sys.stderr)
    print("Size after compression: ", _fmt_bytes(compressed), file=sys.stderr)
    if compressed:
        print(f"Compression ratio: {original / compressed:.2f}", file=sys.stderr)


def model_lines(data: bytes) -> List[str]:
    """Describe the Huffman model of ``data``, one line per symbol.

    :param data: Uncompressed input.
    :type data: bytes
    :returns: Lines of the form ``'A'  count=5  code=1``.
    :rtype: List[str]
    """
    table = FrequencyTable.from_bytes(data)
    tree = build_tree(table)
    codes: Dict[int, str] = {}
    if isinstance(tree, HuffmanTree):
        codes = build_codes(tree.root)
    lines = []
    for symbol, count in table.items():
        line = f"{_fmt_symbol(symbol)}  count={count}"
        if symbol in codes:
            line += f"  code={codes[symbol]}"
        lines.append(line)
    return lines


def encode_file(
    input_path: str,
    output_path: str,
    hide_progress: bool = True,
    show_stats: bool = False,
    dump: bool = False,
) -> None:
    """Compress ``input_path`` into ``output_path``.

    The whole result is built in memory before the output is opened.

    :param input_path: File to compress, ``-`` for standard input.
    :type input_path: str
    :param output_path: Destination, ``-`` for standard output.
    :type output_path: str
    :param hide_progress: Whether to suppress the progress line.
    :type hide_progress: bool
    :param show_stats: Whether to print sizes and ratio.
    :type show_stats: bool
    :param dump: Whether to print the symbol model.
    :type dump: bool
    :returns: None
    :rtype: None
    :raises OSError: If reading or writing fails.
    """
    data = _read_input(input_path)
    if dump:
        for line in model_lines(data):
            print(line, file=sys.stderr)
    if hide_progress:
        comp = Compressor().compress(data)
    else:
        on_prog = Progress("Encoding", _display_name(input_path, "stdin"))
        comp = Compressor().compress(data, on_progress=on_prog)
        _end_progress()
    _write_output(output_path, comp)
    if show_stats:
        _print_stats(len(data), len(comp))


def decode_file(
    input_path: str,
    output_path: str,
    hide_progress: bool = True,
    show_stats: bool = False,
) -> None:
    """Decompress ``input_path`` into ``output_path``.

    Nothing is written unless decoding succeeds.

    :param input_path: Compressed file, ``-`` for standard input.
    :type input_path: str
    :param output_path: Destination, ``-`` for standard output.
    :type output_path: str
    :param hide_progress: Whether to suppress the progress line.
    :type hide_progress: bool
    :param show_stats: Whether to print sizes and ratio.
    :type show_stats: bool
    :returns: None
    :rtype: None
    :raises OSError: If reading or writing fails.
    :raises MalformedInputError: If the input is not valid compressed data.
    """
    comp = _read_input(input_path)
    if hide_progress:
        data = Decompressor().decompress(comp)
    else:
        on_prog = Progress("Decoding", _display_name(input_path, "stdin"))
        try:
            data = Decompressor().decompress(comp, on_progress=on_prog)
        finally:
            _end_progress()
    _write_output(output_path, data)
    if show_stats:
        _print_stats(len(data), len(comp))


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI tool.

    :param argv: Arguments, defaults to ``sys.argv[1:]``.
    :type argv: Optional[List[str]]
    :returns: Process exit status.
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    try:
        if args.cmd in ["encode", "e"]:
            encode_file(
                args.input,
                args.output,
                hide_progress=args.no_progress,
                show_stats=args.stats,
                dump=args.dump,
            )
        elif args.cmd in ["decode", "d"]:
            decode_file(
                args.input,
                args.output,
                hide_progress=args.no_progress,
                show_stats=args.stats,
            )
    except MalformedInputError as e:
        print(f"[!] Invalid compressed data: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        if e.filename:
            print(f"[!] {e.strerror}: {e.filename}", file=sys.stderr)
        else:
            print(f"[!] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
