"""
Command line front end for the Huffman code tools

How to run:
  python main.py build freqs.txt -o code.txt
  python main.py codes code.txt
  python main.py decode code.txt bits.txt -o message.bin
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from codefile import load_code, save_code
from decoder import BitInputStream, decode_stream
from errors import HuffmanError, InvalidInput
from huffman import build_huffman_tree, generate_huffman_codes


def read_frequencies(path: Path) -> List[int]:
    """One integer per line, line index = symbol. Blank lines are skipped"""
    frequencies: List[int] = []
    with path.open("r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            text = line.strip()
            if not text:
                continue
            try:
                frequencies.append(int(text))
            except ValueError:
                raise InvalidInput(f"{path}:{line_no}: not an integer frequency: {text!r}") from None
    return frequencies


def cmd_build(args: argparse.Namespace) -> int:
    root = build_huffman_tree(read_frequencies(Path(args.freqs)))
    with open(args.output, "w", encoding="ascii", newline="\n") as out:
        save_code(root, out)
    print(f"Wrote {len(generate_huffman_codes(root))} codes to {args.output}")
    return 0


def cmd_codes(args: argparse.Namespace) -> int:
    with open(args.codefile, "r", encoding="ascii") as f:
        root = load_code(f)
    for symbol, code in generate_huffman_codes(root).items():
        print(f"{symbol}\t{code}")
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    with open(args.codefile, "r", encoding="ascii") as f:
        root = load_code(f)
    bits = BitInputStream.from_file(args.bits)
    with open(args.output, "wb") as out:
        count = decode_stream(root, bits, out)
    print(f"Decoded {count} symbols to {args.output}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Build, inspect and apply Huffman prefix codes")
    sub = ap.add_subparsers(dest="command")

    build_ap = sub.add_parser("build", help="Build a code file from a frequency table")
    build_ap.add_argument("freqs", help="Text file with one frequency per line (line index = symbol)")
    build_ap.add_argument("-o", "--output", required=True, help="Code file to write")
    build_ap.set_defaults(func=cmd_build)

    codes_ap = sub.add_parser("codes", help="List the symbol -> bit path table of a code file")
    codes_ap.add_argument("codefile", help="Code file to read")
    codes_ap.set_defaults(func=cmd_codes)

    decode_ap = sub.add_parser("decode", help="Decode a bit file with a code file")
    decode_ap.add_argument("codefile", help="Code file to read")
    decode_ap.add_argument("bits", help="Text file of '0'/'1' characters")
    decode_ap.add_argument("-o", "--output", required=True, help="Binary file for the decoded symbols")
    decode_ap.set_defaults(func=cmd_decode)

    args = ap.parse_args(argv)
    if not args.command:
        ap.print_help()
        return 0

    try:
        return args.func(args)
    except (HuffmanError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
