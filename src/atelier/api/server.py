"""FastAPI server for running simulations over HTTP."""

from __future__ import annotations

import time
from typing import Any

import click
from fastapi import FastAPI, HTTPException

from atelier import __version__
from atelier.config import SimulationConfig
from atelier.engine.simulation import Simulation
from atelier.storage.database import Database

app = FastAPI(
    title="Atelier API",
    version=__version__,
    description="Decentralized skill-based task allocation simulator",
)

_start_time = time.monotonic()
_db = Database()


@app.get("/api/health")
async def health() -> dict[str, Any]:
    """Health check."""
    uptime = time.monotonic() - _start_time
    return {"status": "ok", "version": __version__, "uptime_seconds": round(uptime, 1)}


@app.post("/api/simulate")
async def simulate(request: dict[str, Any]) -> dict[str, Any]:
    """Run one simulation with the given config and return its statistics."""
    record = bool(request.pop("record", False))
    try:
        config = SimulationConfig.from_dict(request)
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    result = await Simulation(config, data_dir=_db.data_dir, record=record).run()
    return result.to_dict()


@app.get("/api/history")
async def history(limit: int = 20, offset: int = 0) -> dict[str, Any]:
    """Recorded runs, newest first."""
    _db.ensure_tables()
    runs = _db.recent_runs(limit, offset)
    return {"runs": runs, "count": len(runs), "limit": limit, "offset": offset}


@click.command()
@click.option("--port", default=3849, help="Port to listen on")
@click.option("--host", default="127.0.0.1", help="Host to bind to")
def main(port: int, host: str) -> None:
    """Start the Atelier API server."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)
