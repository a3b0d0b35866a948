"""Simulation - Builds the atelier, runs it until quiet, collects statistics."""

from __future__ import annotations

import asyncio
import logging
import random
import time
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from atelier.config import SimulationConfig
from atelier.engine.coordinator import DEFAULT_NAME, CoordinatorAgent, build_backlog
from atelier.engine.transport import LocalTransport
from atelier.engine.worker import WorkerAgent
from atelier.protocol.messages import Message
from atelier.storage.database import Database

logger = logging.getLogger(__name__)

WORKER_PREFIX = "Robot"


@dataclass
class SimulationResult:
    """Outcome of one simulation run."""

    run_id: str
    status: str  # complete, partial, idle
    config: dict[str, Any]
    completed: int
    messages: int
    delivered: int
    delegations: int
    duration_seconds: float
    timed_out: bool
    coordinator: dict[str, Any] = field(default_factory=dict)
    workers: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class Simulation:
    """
    One run of the atelier.

    Workflow:
    1. Seed the backlog and build the coordinator and workers
    2. Start the coordinator, then each worker (spaced by the arrival interval)
    3. Wait until no message is in flight, or the production window runs out
    4. Stop every agent and gather statistics
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        data_dir: Path | None = None,
        record: bool = False,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or SimulationConfig()
        self.data_dir = data_dir
        self.record = record
        self.rng = rng or random.Random(self.config.seed)

    def build(self) -> tuple[CoordinatorAgent, list[WorkerAgent], LocalTransport]:
        """Create the agents and the transport that links their mailboxes."""
        cfg = self.config
        worker_names = [f"{WORKER_PREFIX}{i}" for i in range(1, cfg.workers + 1)]
        mailboxes: dict[str, asyncio.Queue[Message]] = {
            name: asyncio.Queue() for name in [DEFAULT_NAME, *worker_names]
        }
        transport = LocalTransport(mailboxes)
        delay = cfg.processing_delay_ms / 1000

        coordinator = CoordinatorAgent(
            transport,
            build_backlog(cfg.products, cfg.skills),
            name=DEFAULT_NAME,
            mailbox=mailboxes[DEFAULT_NAME],
            processing_delay=delay,
        )
        workers = [
            WorkerAgent(
                name,
                transport,
                coordinator=DEFAULT_NAME,
                peers=worker_names,
                skill_count=cfg.skills,
                rng=random.Random(self.rng.getrandbits(64)),
                mailbox=mailboxes[name],
                processing_delay=delay,
            )
            for name in worker_names
        ]
        return coordinator, workers, transport

    async def run(self) -> SimulationResult:
        cfg = self.config
        run_id = f"run-{uuid.uuid4().hex[:8]}"
        coordinator, workers, transport = self.build()
        logger.info(
            "Starting %s: %d workers, %d skills, %d products",
            run_id,
            cfg.workers,
            cfg.skills,
            cfg.products,
        )

        start_time = time.time()
        timed_out = False
        try:
            coordinator.start()
            for index, worker in enumerate(workers):
                if index and cfg.arrival_interval_ms:
                    await asyncio.sleep(cfg.arrival_interval_ms / 1000)
                worker.start()

            try:
                await asyncio.wait_for(transport.wait_quiet(), timeout=cfg.production_window_ms / 1000)
            except asyncio.TimeoutError:
                timed_out = True
                logger.warning(
                    "%s still busy after %dms, stopping with %d messages in flight",
                    run_id,
                    cfg.production_window_ms,
                    transport.in_flight,
                )
        finally:
            for agent in [*workers, coordinator]:
                await agent.stop()

        result = self._collect(run_id, coordinator, workers, transport, time.time() - start_time, timed_out)

        if self.record:
            db = Database(self.data_dir)
            db.ensure_tables()
            db.record_run(result.to_dict())

        return result

    def _collect(
        self,
        run_id: str,
        coordinator: CoordinatorAgent,
        workers: list[WorkerAgent],
        transport: LocalTransport,
        duration: float,
        timed_out: bool,
    ) -> SimulationResult:
        coord_stats = coordinator.stats()
        distinct = coord_stats["distinct_completed"]
        if distinct == 0:
            status = "idle"
        elif distinct >= self.config.products:
            status = "complete"
        else:
            status = "partial"

        return SimulationResult(
            run_id=run_id,
            status=status,
            config=self.config.to_dict(),
            completed=coordinator.completed_count,
            messages=coordinator.message_count,
            delivered=transport.delivered,
            delegations=sum(w.stats.delegations for w in workers),
            duration_seconds=round(duration, 3),
            timed_out=timed_out,
            coordinator=coord_stats,
            workers=[w.summary() for w in workers],
        )


def run_simulation(
    config: SimulationConfig | None = None,
    data_dir: Path | None = None,
    record: bool = False,
) -> SimulationResult:
    """Run a simulation to completion from synchronous code."""
    return asyncio.run(Simulation(config, data_dir=data_dir, record=record).run())
