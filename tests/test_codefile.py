import io

import pytest

from codefile import dumps_code, load_code, loads_code, save_code
from errors import FormatError, InvalidState
from huffman import HuffmanInternal, HuffmanLeaf, build_huffman_tree, generate_huffman_codes

TEXTBOOK = {ord('A'): 5, ord('B'): 9, ord('C'): 12, ord('D'): 13, ord('E'): 16, ord('F'): 45}


def test_save_writes_pairs_depth_first_left_first():
    text = dumps_code(build_huffman_tree(TEXTBOOK))
    assert text == "70\n0\n67\n100\n68\n101\n65\n1100\n66\n1101\n69\n111\n"


def test_save_to_stream():
    out = io.StringIO()
    save_code(build_huffman_tree([0, 4, 4]), out)
    assert out.getvalue() == "1\n0\n2\n1\n"


def test_save_empty_tree_raises():
    with pytest.raises(InvalidState):
        dumps_code(None)


def test_save_load_round_trip():
    table = [(i * 31) % 17 for i in range(256)]
    root = build_huffman_tree(table)
    loaded = loads_code(dumps_code(root))
    assert generate_huffman_codes(loaded) == generate_huffman_codes(root)
    assert dumps_code(loaded) == dumps_code(root)


def test_load_from_file_lines(tmp_path):
    path = tmp_path / "code.txt"
    path.write_text("97\n0\n98\n10\n99\n11\n")
    with path.open() as f:
        root = load_code(f)
    assert generate_huffman_codes(root) == {97: "0", 98: "10", 99: "11"}


def test_load_shares_prefix_nodes():
    root = loads_code("1\n00\n2\n01\n3\n1\n")
    assert isinstance(root, HuffmanInternal)
    assert isinstance(root.left, HuffmanInternal)
    assert root.left.left.symbol == 1
    assert root.left.right.symbol == 2
    assert root.right.symbol == 3


def test_load_accepts_crlf_lines():
    assert generate_huffman_codes(load_code(["5\r\n", "0\r\n", "6\r\n", "1\r\n"])) == {5: "0", 6: "1"}


def test_load_empty_path_makes_root_leaf():
    root = loads_code("65\n\n")
    assert isinstance(root, HuffmanLeaf)
    assert root.symbol == 65
    assert dumps_code(root) == "65\n\n"


def test_load_empty_input_gives_empty_tree():
    assert loads_code("") is None


def test_single_symbol_round_trip():
    root = build_huffman_tree({65: 3})
    text = dumps_code(root)
    assert text == "65\n0\n"
    assert generate_huffman_codes(loads_code(text)) == {65: "0"}


@pytest.mark.parametrize("text", [
    "65\n01x\n",        # bad path character
    "6a\n0\n",          # non-integer symbol
    "-1\n0\n",          # sign is not allowed
    "300\n0\n",         # outside the byte alphabet
    "9" * 5000 + "\n0\n",  # far too many digits
    "65\n0\n66\n",      # truncated pair
    "65\n0\n\n",        # trailing blank line
    "65\n0\n65\n1\n",   # duplicate symbol
    "65\n0\n66\n0\n",   # same path twice
    "65\n0\n66\n01\n",  # path runs through a leaf
    "65\n01\n66\n0\n",  # leaf on top of an internal node
    "65\n\n66\n1\n",    # root is a leaf
    "65\n0\n66\n\n",    # empty path after the root exists
])
def test_malformed_input_raises(text):
    with pytest.raises(FormatError):
        loads_code(text)


def test_failed_load_leaves_nothing_behind():
    root = "unchanged"
    with pytest.raises(FormatError):
        root = loads_code("97\n0\n98\n01x\n")
    assert root == "unchanged"


def test_error_message_names_the_line():
    with pytest.raises(FormatError, match="line 4"):
        loads_code("97\n0\n98\n01x\n")
