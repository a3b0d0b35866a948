"""Agent - Mailbox and serial message loop shared by every atelier agent."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from enum import StrEnum

from atelier.engine.transport import Transport
from atelier.protocol.messages import Message

logger = logging.getLogger(__name__)


class AgentState(StrEnum):
    """Agent lifecycle states."""

    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class Agent(ABC):
    """
    An independently scheduled actor.

    Messages are taken from the mailbox one at a time and handled to
    completion before the next one is read, so an agent's own state never
    needs locking. Agents only talk to each other through the transport.
    """

    def __init__(
        self,
        name: str,
        transport: Transport,
        mailbox: asyncio.Queue[Message] | None = None,
        processing_delay: float = 0.0,
    ) -> None:
        self.name = name
        self.transport = transport
        self.mailbox: asyncio.Queue[Message] = mailbox if mailbox is not None else asyncio.Queue()
        self.processing_delay = processing_delay
        self.state = AgentState.CREATED
        self._task: asyncio.Task[None] | None = None

    @abstractmethod
    def handle(self, message: Message) -> None:
        """Process one inbound message."""

    def on_start(self) -> None:
        """Hook run once before the loop starts."""

    def on_stop(self) -> None:
        """Hook run once after the loop stops."""

    def deliver(self, message: Message) -> None:
        """Handle a message, logging instead of propagating handler failures."""
        try:
            self.handle(message)
        except Exception:
            logger.exception("%s failed handling %s from %s", self.name, message.kind, message.sender)

    def start(self) -> asyncio.Task[None]:
        """Run on_start and schedule the message loop. Needs a running event loop."""
        if self._task is not None:
            raise RuntimeError(f"Agent {self.name} already started")
        self.on_start()
        self.state = AgentState.RUNNING
        self._task = asyncio.create_task(self._run(), name=self.name)
        return self._task

    async def stop(self) -> None:
        """Cancel the loop between messages and run on_stop."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        if self.state != AgentState.STOPPED:
            self.state = AgentState.STOPPED
            self.on_stop()

    async def _run(self) -> None:
        while True:
            message = await self.mailbox.get()
            try:
                if self.processing_delay > 0:
                    await asyncio.sleep(self.processing_delay)
                self.deliver(message)
            finally:
                self.mailbox.task_done()
                self.transport.mark_handled()
