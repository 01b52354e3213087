#!/usr/bin/env python3
"""
Quick smoke check that the MCP server imports and its tools answer.
Run this before pointing an MCP client at the server.
"""

import asyncio
import os
import sys

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

from lpviz_solvers.server import app, solve_lp

SQUARE = [[1.0, 0.0, 1.0], [-1.0, 0.0, 0.0], [0.0, 1.0, 1.0], [0.0, -1.0, 0.0]]


def check_every_solver():
    print("Solving the unit square with every engine...")
    ok = True
    for solver in ("simplex", "ipm", "pdhg", "central"):
        result = solve_lp(solver, SQUARE, [1.0, 1.0])
        last = result["iterates"][-1] if result["iterates"] else None
        print(f"  {solver:8s} status={result['status']:15s} last={last}")
        ok &= result["status"] in ("converged", "max_iterations")
    return ok


def check_tools_available():
    print("\nChecking available tools...")
    expected = {"solve_simplex", "solve_ipm", "solve_pdhg", "solve_central_path", "solve_lp"}
    names = {tool.name for tool in asyncio.run(app.list_tools())}
    for name in sorted(names):
        print(f"  - {name}")
    missing = expected - names
    if missing:
        print(f"Missing tools: {sorted(missing)}")
    return not missing


if __name__ == "__main__":
    print("=" * 60)
    print("MCP Server Check")
    print("=" * 60)

    success = True
    success &= check_tools_available()
    success &= check_every_solver()

    print("\n" + "=" * 60)
    if success:
        print("Server is ready to use.")
        print("For HTTP: run 'python -m lpviz_solvers.server' with MCP_TRANSPORT=http")
    else:
        print("Some checks failed. See the output above.")
        sys.exit(1)
