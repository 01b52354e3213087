#!/usr/bin/env python3
import time

from lpviz_solvers.schemas import SolveRequest
from lpviz_solvers.service import SOLVERS, solve
from scripts.generate_instances import generate_random_polygon

SQUARE = {
    "lines": [[1.0, 0.0, 1.0], [-1.0, 0.0, 0.0], [0.0, 1.0, 1.0], [0.0, -1.0, 0.0]],
    "objective": [1.0, 1.0],
}


def main() -> None:
    cases = [("unit-square", SQUARE)]
    for seed in range(3):
        cases.append((f"random-{seed}", generate_random_polygon(6, seed)))

    print("name,solver,status,iterates,time_ms")
    for name, instance in cases:
        for solver in SOLVERS:
            start = time.perf_counter()
            result = solve(SolveRequest(solver=solver, **instance))
            elapsed_ms = (time.perf_counter() - start) * 1000
            print(f"{name},{solver},{result.status},{len(result.iterates)},{elapsed_ms:.2f}")


if __name__ == "__main__":
    main()
