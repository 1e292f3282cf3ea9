import heapq
from collections.abc import Mapping
from typing import Dict, Iterable, List, Optional, Tuple, Union

from errors import InvalidInput

MAX_SYMBOL = 255 # byte alphabet
ALPHABET_SIZE = MAX_SYMBOL + 1


class HuffmanLeaf: # Leaf of the Huffman tree, holds exactly one symbol
    def __init__(self, symbol: int, weight: int = 0):
        self.symbol = symbol
        self.weight = weight # only meaningful while building

    def __repr__(self):
        return f"HuffmanLeaf({self.symbol})"


class HuffmanInternal: # Internal node, never holds a symbol
    def __init__(self, left=None, right=None, weight: int = 0):
        self.left = left
        self.right = right
        self.weight = weight

    def __repr__(self):
        return f"HuffmanInternal({self.left!r}, {self.right!r})"


HuffmanNode = Union[HuffmanLeaf, HuffmanInternal]


def is_leaf(node) -> bool:
    return isinstance(node, HuffmanLeaf)


def _positive_entries(frequencies) -> List[Tuple[int, int]]:
    if isinstance(frequencies, Mapping):
        for symbol in frequencies:
            if not isinstance(symbol, int):
                raise InvalidInput(f"symbol {symbol!r} is not an integer")
        items = sorted(frequencies.items())
    else:
        items = list(enumerate(frequencies))
        if len(items) > ALPHABET_SIZE:
            raise InvalidInput(f"frequency table has {len(items)} entries, at most {ALPHABET_SIZE} allowed")

    entries = []
    for symbol, frequency in items:
        if not isinstance(symbol, int) or symbol < 0 or symbol > MAX_SYMBOL:
            raise InvalidInput(f"symbol {symbol!r} outside 0..{MAX_SYMBOL}")
        if frequency > 0: # absent symbols get no code
            entries.append((symbol, frequency))
    return entries


def build_huffman_tree(frequencies) -> HuffmanInternal:
    """
    Build a Huffman tree from a frequency table

    frequencies is either a sequence indexed by symbol or a dict of symbol -> frequency.
    Equal weights leave the heap in arrival order (FIFO), so the same table
    always gives the same tree. A single symbol is wrapped under an internal
    root as its left child so that it still has a 1-bit code.
    """
    entries = _positive_entries(frequencies)
    if not entries:
        raise InvalidInput("no symbol has a positive frequency")

    priority_queue = [] # entries are (weight, arrival, node)
    arrival = 0
    for symbol, frequency in entries:
        priority_queue.append((frequency, arrival, HuffmanLeaf(symbol, frequency)))
        arrival += 1
    heapq.heapify(priority_queue)

    if len(priority_queue) == 1:
        weight, _, leaf = priority_queue[0]
        return HuffmanInternal(left=leaf, weight=weight)

    # Build the tree
    while len(priority_queue) > 1:
        left_weight, _, left = heapq.heappop(priority_queue)
        right_weight, _, right = heapq.heappop(priority_queue)
        merged_weight = left_weight + right_weight
        merged_node = HuffmanInternal(left, right, merged_weight)
        heapq.heappush(priority_queue, (merged_weight, arrival, merged_node))
        arrival += 1

    return priority_queue[0][2] # root of the tree


def iter_leaf_paths(root: HuffmanNode) -> Iterable[Tuple[int, str]]:
    """Yield (symbol, path) for every leaf, depth first, left before right"""
    stack = [(root, "")]
    while stack:
        node, path = stack.pop()
        if is_leaf(node):
            yield node.symbol, path
            continue
        # right is pushed first so left comes off the stack first
        if node.right is not None:
            stack.append((node.right, path + "1"))
        if node.left is not None:
            stack.append((node.left, path + "0"))


def generate_huffman_codes(root: Optional[HuffmanNode]) -> Dict[int, str]:
    if root is None:
        return {}
    return dict(iter_leaf_paths(root))


def huffman_encode(symbols: Iterable[int], code_map: Dict[int, str]) -> str:
    bits = []
    for symbol in symbols:
        code = code_map.get(symbol)
        if code is None:
            raise InvalidInput(f"symbol {symbol} has no code")
        bits.append(code)
    return "".join(bits)


def average_code_length(code_map: Dict[int, str], frequencies) -> float: # expected bits per symbol
    entries = _positive_entries(frequencies)
    total = sum(frequency for _, frequency in entries)
    if total == 0:
        return 0.0
    return sum(frequency * len(code_map[symbol]) for symbol, frequency in entries) / total
