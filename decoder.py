from typing import Iterable, Iterator, Optional, Union

from errors import InvalidState, TruncatedStream, UnknownCode
from huffman import HuffmanNode, is_leaf


class BitInputStream: # forward-only source of single bits
    def __init__(self, bits: Union[str, Iterable[int]]):
        self._bits = iter(bits)
        self._pending = None
        self._fill()

    def _fill(self) -> None:
        self._pending = next(self._bits, None)

    @classmethod
    def from_file(cls, path) -> "BitInputStream": # text file of '0'/'1' characters, whitespace ignored
        with open(path, "r", encoding="ascii") as f:
            text = f.read()
        return cls("".join(text.split()))

    def has_next_bit(self) -> bool:
        return self._pending is not None

    def next_bit(self) -> int:
        if self._pending is None:
            raise EOFError("no bits left in the stream")
        bit = self._pending
        if bit in ("0", 0):
            value = 0
        elif bit in ("1", 1):
            value = 1
        else:
            raise ValueError(f"not a bit: {bit!r}")
        self._fill()
        return value


def _walk(root: HuffmanNode, bit_source) -> Iterator[int]:
    current = root
    bits_in_code = 0
    while bit_source.has_next_bit():
        bit = bit_source.next_bit()
        bits_in_code += 1
        current = current.left if bit == 0 else current.right
        if current is None:
            raise UnknownCode(f"no code continues with bit {bit} after {bits_in_code - 1} bits")

        # Leaf -> emit and restart at the root
        if is_leaf(current):
            yield current.symbol
            current = root
            bits_in_code = 0

    if current is not root:
        raise TruncatedStream(f"bit stream ended {bits_in_code} bits into a code")


def decode_symbols(root: Optional[HuffmanNode], bit_source) -> Iterator[int]:
    """
    Walk the tree bit by bit and yield a symbol every time a leaf is reached

    bit_source needs has_next_bit() and next_bit(). An empty tree or a lone
    root leaf raises InvalidState right away, before any bit is read.
    Iterating raises TruncatedStream if the bits run out part way down a
    path; symbols completed before that point have already been yielded.
    """
    if root is None:
        raise InvalidState("cannot decode with an empty Huffman tree")
    if is_leaf(root):
        raise InvalidState(f"symbol {root.symbol} has a zero-length code and cannot be decoded bit by bit")
    return _walk(root, bit_source)


def decode_stream(root: Optional[HuffmanNode], bit_source, output) -> int:
    """Decode into a binary sink, one byte per symbol. Returns the number of symbols written"""
    count = 0
    for symbol in decode_symbols(root, bit_source):
        output.write(bytes((symbol,)))
        count += 1
    return count


def huffman_decode(bitstring: str, root: Optional[HuffmanNode]) -> bytes:
    return bytes(decode_symbols(root, BitInputStream(bitstring)))
