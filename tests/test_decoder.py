import io
import random

import pytest

from codefile import dumps_code, loads_code
from decoder import BitInputStream, decode_stream, decode_symbols, huffman_decode
from errors import InvalidState, TruncatedStream, UnknownCode
from huffman import build_huffman_tree, generate_huffman_codes, huffman_encode

TEXTBOOK = {ord('A'): 5, ord('B'): 9, ord('C'): 12, ord('D'): 13, ord('E'): 16, ord('F'): 45}


class TestBitInputStream:
    def test_reads_string_and_ints(self):
        for source in ("101", [1, 0, 1]):
            bits = BitInputStream(source)
            out = []
            while bits.has_next_bit():
                out.append(bits.next_bit())
            assert out == [1, 0, 1]

    def test_empty_stream(self):
        bits = BitInputStream("")
        assert not bits.has_next_bit()
        with pytest.raises(EOFError):
            bits.next_bit()

    def test_rejects_non_bits(self):
        bits = BitInputStream("1x")
        assert bits.next_bit() == 1
        with pytest.raises(ValueError):
            bits.next_bit()

    def test_from_file_ignores_whitespace(self, tmp_path):
        path = tmp_path / "bits.txt"
        path.write_text("01 1\n0\n")
        bits = BitInputStream.from_file(path)
        out = []
        while bits.has_next_bit():
            out.append(bits.next_bit())
        assert out == [0, 1, 1, 0]


def test_decode_textbook_stream():
    root = build_huffman_tree(TEXTBOOK)
    assert huffman_decode("0" "1100" "1101" "100" "101" "111", root) == b"FABCDE"


def test_encode_decode_round_trip():
    rng = random.Random(7)
    data = bytes(rng.choice(b"the quick brown fox jumps over the lazy dog") for _ in range(2000))
    table = [0] * 256
    for b in data:
        table[b] += 1
    root = build_huffman_tree(table)
    bits = huffman_encode(data, generate_huffman_codes(root))
    assert huffman_decode(bits, root) == data


def test_decode_with_loaded_tree():
    root = build_huffman_tree(TEXTBOOK)
    loaded = loads_code(dumps_code(root))
    bits = huffman_encode(b"DEADBEEF", generate_huffman_codes(root))
    assert huffman_decode(bits, loaded) == b"DEADBEEF"


def test_decode_stream_writes_bytes():
    root = build_huffman_tree(TEXTBOOK)
    out = io.BytesIO()
    count = decode_stream(root, BitInputStream("01100"), out)
    assert count == 2
    assert out.getvalue() == b"FA"


def test_empty_bit_stream_decodes_nothing():
    assert huffman_decode("", build_huffman_tree(TEXTBOOK)) == b""


def test_single_symbol_decodes_one_symbol_per_bit():
    root = build_huffman_tree({65: 4})
    assert huffman_decode("000", root) == b"AAA"


def test_single_symbol_unused_branch():
    root = build_huffman_tree({65: 4})
    with pytest.raises(UnknownCode):
        huffman_decode("01", root)


def test_truncated_stream_raises():
    root = build_huffman_tree(TEXTBOOK)
    with pytest.raises(TruncatedStream):
        huffman_decode("0110", root)


def test_truncated_stream_keeps_completed_symbols():
    root = build_huffman_tree(TEXTBOOK)
    out = io.BytesIO()
    with pytest.raises(TruncatedStream):
        decode_stream(root, BitInputStream("0" "0" "11"), out)
    assert out.getvalue() == b"FF"


def test_empty_tree_raises():
    with pytest.raises(InvalidState):
        decode_symbols(None, BitInputStream("0"))


def test_root_leaf_cannot_decode():
    with pytest.raises(InvalidState):
        decode_symbols(loads_code("65\n\n"), BitInputStream("0"))


def test_empty_tree_fails_before_reading_bits():
    bits = BitInputStream("01")
    with pytest.raises(InvalidState):
        decode_symbols(None, bits)
    assert bits.has_next_bit()
