"""
Code file reading and writing

A code file holds one pair of lines per leaf of the Huffman tree:

    <symbol as a decimal integer>
    <path from the root, '0' for left and '1' for right>

There is no header, footer or count.
"""

import io
import re
from typing import Iterable, Optional

from errors import FormatError, InvalidState
from huffman import MAX_SYMBOL, HuffmanInternal, HuffmanLeaf, HuffmanNode, is_leaf, iter_leaf_paths

_SYMBOL_LINE = re.compile(r"[0-9]{1,3}")
_PATH_LINE = re.compile(r"[01]*")


def save_code(root: Optional[HuffmanNode], output) -> None:
    """Write every leaf of the tree to a text sink as a (symbol, path) pair of lines"""
    if root is None:
        raise InvalidState("cannot save an empty Huffman tree")
    for symbol, path in iter_leaf_paths(root):
        output.write(f"{symbol}\n")
        output.write(f"{path}\n")


def dumps_code(root: Optional[HuffmanNode]) -> str:
    out = io.StringIO()
    save_code(root, out)
    return out.getvalue()


def _parse_symbol(line: str, line_no: int) -> int:
    if not _SYMBOL_LINE.fullmatch(line):
        raise FormatError(f"line {line_no}: expected a symbol value, got {line!r}")
    symbol = int(line)
    if symbol > MAX_SYMBOL:
        raise FormatError(f"line {line_no}: symbol {symbol} outside 0..{MAX_SYMBOL}")
    return symbol


def _parse_path(line: str, line_no: int) -> str:
    if not _PATH_LINE.fullmatch(line):
        raise FormatError(f"line {line_no}: path may only contain '0' and '1', got {line!r}")
    return line


def _attach(root: Optional[HuffmanNode], symbol: int, path: str, line_no: int) -> HuffmanNode:
    # empty path: the first symbol becomes the root leaf
    if not path:
        if root is not None:
            raise FormatError(f"line {line_no}: empty path but the tree already has a root")
        return HuffmanLeaf(symbol)

    if root is None:
        root = HuffmanInternal()
    elif is_leaf(root):
        raise FormatError(f"line {line_no}: path {path!r} passes through the leaf at the root")

    node = root
    for step in path[:-1]:
        child = node.left if step == "0" else node.right
        if child is None:
            child = HuffmanInternal()
            if step == "0":
                node.left = child
            else:
                node.right = child
        elif is_leaf(child):
            raise FormatError(f"line {line_no}: path {path!r} passes through the leaf for symbol {child.symbol}")
        node = child

    last = path[-1]
    occupied = node.left if last == "0" else node.right
    if occupied is not None:
        raise FormatError(f"line {line_no}: path {path!r} is already in use")
    if last == "0":
        node.left = HuffmanLeaf(symbol)
    else:
        node.right = HuffmanLeaf(symbol)
    return root


def load_code(lines: Iterable[str]) -> Optional[HuffmanNode]:
    """
    Rebuild a Huffman tree from (symbol, path) line pairs

    Internal nodes along each path are created on demand so pairs sharing a
    prefix share the same nodes. Returns None when there are no lines at all.
    The tree only becomes visible once every pair has been read; any
    malformed pair raises FormatError and nothing is returned.
    """
    root = None
    seen = set()
    symbol = None
    symbol_line_no = 0

    for line_no, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if symbol is None:
            symbol = _parse_symbol(line, line_no)
            symbol_line_no = line_no
            continue

        path = _parse_path(line, line_no)
        if symbol in seen:
            raise FormatError(f"line {symbol_line_no}: symbol {symbol} appears more than once")
        seen.add(symbol)
        root = _attach(root, symbol, path, line_no)
        symbol = None

    if symbol is not None:
        raise FormatError(f"line {symbol_line_no}: symbol {symbol} has no path line")
    return root


def loads_code(text: str) -> Optional[HuffmanNode]:
    return load_code(text.splitlines())
