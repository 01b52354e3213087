from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from .schemas import CentralPathOptions, IPMOptions, PDHGOptions, SimplexOptions, SolveRequest, SolverName
from .service import solve

app = FastMCP("LP Visualizer Solvers")


def _run(
    solver: str,
    lines: List[List[float]],
    objective: List[float],
    options: Optional[Dict[str, Any]] = None,
    vertices: Optional[List[List[float]]] = None,
) -> dict:
    request = SolveRequest(
        solver=solver,
        lines=lines,
        objective=objective,
        options=options or {},
        vertices=vertices,
    )
    return solve(request).model_dump()


@app.tool()
def solve_simplex(
    lines: List[List[float]], objective: List[float], options: SimplexOptions | None = None
) -> dict:
    """Maximise objective . x subject to rows (a_1, ..., a_n, b) meaning a . x <= b, with two-phase simplex."""
    opts = options or SimplexOptions()
    return _run("simplex", lines, objective, opts.model_dump())


@app.tool()
def solve_ipm(
    lines: List[List[float]], objective: List[float], options: IPMOptions | None = None
) -> dict:
    """Solve the LP with a predictor-corrector interior point method and return its iterates."""
    opts = options or IPMOptions()
    return _run("ipm", lines, objective, opts.model_dump())


@app.tool()
def solve_pdhg(
    lines: List[List[float]], objective: List[float], options: PDHGOptions | None = None
) -> dict:
    """Solve the LP with PDHG (standard form, or inequality form with ineq=true)."""
    opts = options or PDHGOptions()
    return _run("pdhg", lines, objective, opts.model_dump())


@app.tool()
def solve_central_path(
    lines: List[List[float]],
    objective: List[float],
    options: CentralPathOptions | None = None,
    vertices: Optional[List[List[float]]] = None,
) -> dict:
    """Trace the log-barrier central path; vertices, if given, seed the start at their centroid."""
    opts = options or CentralPathOptions()
    return _run("central", lines, objective, opts.model_dump(), vertices)


@app.tool()
def solve_lp(
    solver: SolverName,
    lines: List[List[float]],
    objective: List[float],
    options: Optional[Dict[str, Any]] = None,
    vertices: Optional[List[List[float]]] = None,
) -> dict:
    """Run any engine by name: simplex, ipm, pdhg or central."""
    return _run(solver, lines, objective, options, vertices)


if __name__ == "__main__":
    import sys

    # stdio for desktop clients, streamable HTTP otherwise
    transport = os.environ.get("MCP_TRANSPORT", "stdio")

    if transport == "stdio" or "--stdio" in sys.argv:
        app.run(transport="stdio")
    else:
        port = int(os.environ.get("PORT", "8081"))
        app.settings.host = "0.0.0.0"
        app.settings.port = port
        app.settings.streamable_http_path = "/mcp"
        app.settings.transport_security = TransportSecuritySettings(
            enable_dns_rebinding_protection=False,
            allowed_hosts=["*"],
            allowed_origins=["*"],
        )
        app.run(transport="streamable-http")
