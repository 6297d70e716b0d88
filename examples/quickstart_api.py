#!/usr/bin/env python3
"""Quickstart example using the high-level compress/decompress API.

This example demonstrates the simplest way to use the library:
- Draw a random ID set (or read one from a text file)
- Compress it with ROC and with delta coding using compress_set()
- Decompress it back with decompress_set()
- Compare both sizes against the log2(C(N, n)) bound
"""

from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np

from cnk import RocCompressor
from cnk.api import (
    compress_set,
    decompress_set,
    get_compression_info,
    get_compression_ratio,
)


def _load_ids(path: Path) -> list[int] | None:
    if not path.exists():
        return None
    values = np.loadtxt(path, dtype=np.int64, ndmin=1)
    return sorted(set(values.tolist()))


def main() -> None:
    parser = argparse.ArgumentParser(description="Quickstart API example")
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Text file with one ID per line (random IDs if omitted)",
    )
    parser.add_argument(
        "--universe",
        type=int,
        default=1_000_000,
        help="Universe size N",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=1000,
        help="Number of random IDs if no input file is given",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to cnk.toml (defaults to repo root)",
    )
    args = parser.parse_args()

    repo_root = Path(__file__).resolve().parents[1]
    config_path = args.config or (repo_root / "cnk.toml")
    config_arg = str(config_path) if config_path.exists() else None
    compressor = RocCompressor(config_path=config_arg)

    ids = _load_ids(args.input) if args.input else None
    if ids is None:
        print(f"Drawing {args.count} random IDs from [0, {args.universe})")
        rng = np.random.default_rng(args.seed)
        ids = np.sort(rng.choice(args.universe, size=args.count, replace=False)).tolist()
    else:
        print(f"Loaded {len(ids)} IDs from {args.input}")

    print("Compressing...")
    roc = compress_set(ids, args.universe, method="roc", config=compressor.config)
    delta = compress_set(ids, args.universe, method="delta")

    info = get_compression_info(roc)
    print(f"Header: n={info['num_ids']} N={info['universe_size']}")
    print(f"ROC size:   {len(roc)} bytes ({get_compression_ratio(ids, roc):.2f}x vs u32)")
    print(f"Delta size: {len(delta)} bytes ({get_compression_ratio(ids, delta):.2f}x vs u32)")
    bound_bits = compressor.bits_per_id(len(ids), args.universe) * len(ids)
    print(f"Bound:      {bound_bits / 8:.1f} bytes")

    print("Decompressing...")
    recovered = decompress_set(roc, args.universe, config=compressor.config)
    assert recovered == ids
    assert decompress_set(delta, args.universe) == ids
    print("Both buffers decoded to the original IDs")


if __name__ == "__main__":
    main()
