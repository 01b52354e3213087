#!/usr/bin/env python3
import argparse
import json
import math
import random
from pathlib import Path
from typing import Any, Dict, List, Optional


def generate_random_polygon(num_lines: int, seed: Optional[int] = None) -> Dict[str, Any]:
    """Random bounded polygon around the origin as ``(A, B, C)`` rows plus an objective."""
    rng = random.Random(seed)
    # evenly spread directions keep the region bounded; jitter keeps it irregular
    step = 2.0 * math.pi / num_lines
    angles = [idx * step + rng.uniform(-0.3, 0.3) * step for idx in range(num_lines)]
    lines: List[List[float]] = []
    for theta in angles:
        a, b = math.cos(theta), math.sin(theta)
        lines.append([round(a, 6), round(b, 6), round(rng.uniform(1.0, 5.0), 6)])
    objective = [round(rng.uniform(-1.0, 1.0), 6), round(rng.uniform(-1.0, 1.0), 6)]
    return {"lines": lines, "objective": objective}


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate random 2-D LP instances.")
    parser.add_argument("--lines", type=int, default=6, help="Number of inequalities")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--count", type=int, default=1, help="Number of instances")
    parser.add_argument("--out", type=Path, default=None, help="Optional output file")
    args = parser.parse_args()

    payload = [
        generate_random_polygon(args.lines, (args.seed or 0) + idx)
        for idx in range(args.count)
    ]

    if args.out:
        Path(args.out).write_text(json.dumps(payload, indent=2))
    else:
        print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
