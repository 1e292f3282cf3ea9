"""
Huffman code experiments

Builds Huffman codes for synthetic datasets and measures how close the code
gets to the entropy bound, plus the cost of building, persisting and
decoding it. Every run also checks that the code file and the bit stream
round trip exactly.

Outputs (in --outdir):
  - metrics.csv     (raw row per run)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --sizes_kb 4,16,64 --generators zipf128,english_like
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import time
from bisect import bisect_left
from dataclasses import dataclass, fields
from itertools import accumulate
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

# Our implementations
import huffman as huff
from codefile import dumps_code, loads_code
from decoder import BitInputStream, decode_symbols


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def freq_table(data: bytes) -> List[int]:
    ft = [0] * huff.ALPHABET_SIZE
    for b in data:
        ft[b] += 1
    return ft

def shannon_entropy(ft: Sequence[int]) -> float:
    total = sum(ft)
    if total == 0:
        return 0.0
    return -sum((f / total) * math.log2(f / total) for f in ft if f > 0)


# Synthetic dataset generators

def _sample(rng: random.Random, symbols: Sequence[int], weights: Sequence[float], size: int) -> bytes:
    cdf = list(accumulate(weights))
    total = cdf[-1]
    out = bytearray()
    for _ in range(size):
        idx = bisect_left(cdf, rng.random() * total)
        out.append(symbols[min(idx, len(symbols) - 1)])
    return bytes(out)

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    symbols = list(range(256))
    other = (1.0 - dom_frac) / 255
    weights = [dom_frac if s == dominant else other for s in symbols]
    return _sample(rng, symbols, weights, size)

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    weights = [1.0 / ((i + 1) ** s) for i in range(alphabet)]
    return _sample(rng, list(range(alphabet)), weights, size)

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    chars = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return _sample(rng, [ord(c) for c in chars], weights, size)

def gen_single_symbol(size: int, seed: int = 0) -> bytes:
    return bytes([ord('A')]) * size

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform128": lambda size, seed: gen_uniform(size, alphabet=128, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
    "single_symbol": lambda size, seed: gen_single_symbol(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> bytes:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}, choose from {', '.join(sorted(GENERATOR_REGISTRY))}")
    return fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int

    build_ms: float
    save_load_ms: float
    encode_ms: float
    decode_ms: float

    entropy_bits: float
    avg_code_bits: float
    redundancy_bits: float  # avg_code_bits - entropy_bits
    max_code_bits: int
    code_file_bytes: int

    code_file_ok: int  # 1 or 0
    correctness_ok: int  # 1 or 0


def run_one(data: bytes, dataset_name: str = "", run_id: int = 0) -> MetricRow:
    ft = freq_table(data)

    t0 = now_ns()
    root = huff.build_huffman_tree(ft)
    code_map = huff.generate_huffman_codes(root)
    t1 = now_ns()

    # persist and reload the code, the reloaded tree does the decoding
    text = dumps_code(root)
    loaded = loads_code(text)
    t2 = now_ns()

    bits = huff.huffman_encode(data, code_map)
    t3 = now_ns()

    decoded = bytes(decode_symbols(loaded, BitInputStream(bits)))
    t4 = now_ns()

    entropy = shannon_entropy(ft)
    avg_bits = huff.average_code_length(code_map, ft)

    return MetricRow(
        dataset_name=dataset_name,
        file_size_bytes=len(data),
        run_id=run_id,
        unique_symbols=len(code_map),
        build_ms=ns_to_ms(t1 - t0),
        save_load_ms=ns_to_ms(t2 - t1),
        encode_ms=ns_to_ms(t3 - t2),
        decode_ms=ns_to_ms(t4 - t3),
        entropy_bits=entropy,
        avg_code_bits=avg_bits,
        redundancy_bits=avg_bits - entropy,
        max_code_bits=max(len(c) for c in code_map.values()),
        code_file_bytes=len(text.encode("ascii")),
        code_file_ok=1 if huff.generate_huffman_codes(loaded) == code_map else 0,
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    names = [f.name for f in fields(MetricRow)]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=names)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in names})


def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)


SUMMARY_METRICS = ("avg_code_bits", "redundancy_bits", "build_ms", "save_load_ms", "encode_ms", "decode_ms")


def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by dataset_name, file_size_bytes and compute mean/stdev
    """
    key_to: Dict[Tuple[str, int], List[MetricRow]] = {}
    for r in rows:
        key_to.setdefault((r.dataset_name, r.file_size_bytes), []).append(r)

    summary_fields = ["dataset_name", "file_size_bytes", "n_runs", "entropy_bits"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for (dataset_name, size_b), items in sorted(key_to.items()):
            row = {
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "n_runs": len(items),
                "entropy_bits": statistics.mean(x.entropy_bits for x in items),
            }
            for m in SUMMARY_METRICS:
                row[f"{m}_mean"], row[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            row["correctness_ok_rate"] = sum(x.correctness_ok and x.code_file_ok for x in items) / len(items)
            w.writerow(row)


# Plotting

def plot_code_length(rows: List[MetricRow], outdir: Path) -> None:
    datasets = sorted(set(r.dataset_name for r in rows))
    if not datasets:
        return

    def mean_for(dataset: str, field: str) -> float:
        return statistics.mean(getattr(r, field) for r in rows if r.dataset_name == dataset)

    x = list(range(len(datasets)))
    plt.figure()
    plt.plot(x, [mean_for(d, "entropy_bits") for d in datasets], marker="o", label="entropy")
    plt.plot(x, [mean_for(d, "avg_code_bits") for d in datasets], marker="o", label="huffman")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Average Code Length vs Entropy")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "code_length_vs_entropy.png", dpi=200)
    plt.close()


def plot_timing(rows: List[MetricRow], outdir: Path) -> None:
    for dist in sorted(set(r.dataset_name for r in rows)):
        dist_rows = [r for r in rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            return statistics.mean(getattr(r, field) for r in dist_rows if r.file_size_bytes == size)

        plt.figure()
        for field in ("build_ms", "encode_ms", "decode_ms"):
            plt.plot(sizes, [mean_size(s, field) for s in sizes], marker="o", label=field[:-3])
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Time (ms)")
        plt.title(f"Time vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"time_vs_size_{dist}.png", dpi=200)
        plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")
    ap.add_argument("--sizes_kb", type=str, default="4,16,64,256", help="Comma-separated dataset sizes in KB")
    ap.add_argument("--generators", type=str, default="uniform256,zipf128,repetitive90,english_like,single_symbol",
                    help="Comma-separated dataset generator names")
    ap.add_argument("--no_plots", action="store_true", help="Only write the CSV files")
    args = ap.parse_args()

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    sizes = [max(1, int(s)) * 1024 for s in parse_csv_list(args.sizes_kb)]
    rows: List[MetricRow] = []

    for gen_name in parse_csv_list(args.generators):
        for size_b in sizes:
            for run_id in range(1, args.runs + 1):
                data = generate_dataset(gen_name, size_b, args.seed + size_b + run_id)
                rows.append(run_one(data, gen_name, run_id))
        print(f"Finished {gen_name}")

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    if not args.no_plots:
        plot_code_length(rows, outdir)
        plot_timing(rows, outdir)

    ok_rate = sum(r.correctness_ok and r.code_file_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Round-trip rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
