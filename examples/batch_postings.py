#!/usr/bin/env python3
"""Batch example compressing the posting lists of a simulated IVF index.

Vectors ``0..N-1`` are assigned to clusters at random, and each cluster's
posting list is compressed with ROC and with delta coding. The table
compares both against the log2(C(N, n)) bound per list.
"""

from __future__ import annotations

import argparse

import numpy as np

from cnk import DeltaCompressor, EngineConfig, RocCompressor


def main() -> None:
    parser = argparse.ArgumentParser(description="IVF posting list example")
    parser.add_argument("--vectors", type=int, default=100_000, help="Universe size N")
    parser.add_argument("--clusters", type=int, default=16, help="Number of posting lists")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument(
        "--precision-bits",
        type=int,
        default=24,
        help="Probability precision of the ROC engine",
    )
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    # Skewed cluster sizes, like a real k-means assignment
    weights = rng.dirichlet(np.full(args.clusters, 2.0))
    assignment = rng.choice(args.clusters, size=args.vectors, p=weights)
    postings = [np.flatnonzero(assignment == c) for c in range(args.clusters)]

    roc = RocCompressor(config=EngineConfig(precision_bits=args.precision_bits))
    delta = DeltaCompressor()

    print(f"{'Cluster':<8} {'IDs':<8} {'Bound':<10} {'ROC':<10} {'Delta':<10} {'Estimate':<10}")
    print("-" * 60)
    totals = np.zeros(4)
    for c, ids in enumerate(postings):
        roc_data = roc.compress_set(ids, args.vectors)
        delta_data = delta.compress_set(ids, args.vectors)
        assert roc.decompress_set(roc_data, args.vectors) == ids.tolist()

        bound = roc.bits_per_id(len(ids), args.vectors) * len(ids) / 8
        estimate = roc.estimate_size(len(ids), args.vectors)
        row = np.array([bound, len(roc_data), len(delta_data), estimate])
        totals += row
        print(
            f"{c:<8} {len(ids):<8} {bound:<10.1f} {len(roc_data):<10} "
            f"{len(delta_data):<10} {estimate:<10}"
        )

    print("-" * 60)
    print(
        f"{'Total:':<17} {totals[0]:<10.1f} {int(totals[1]):<10} "
        f"{int(totals[2]):<10} {int(totals[3]):<10}"
    )
    raw = args.vectors * 4
    print(f"Raw u32 IDs: {raw} bytes, ROC saves {100 * (1 - totals[1] / raw):.1f}%")


if __name__ == "__main__":
    main()
