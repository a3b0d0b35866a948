"""Coordinator Agent - Hands out the backlog and counts completions."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter, deque
from collections.abc import Iterable
from typing import Any

from atelier.engine.agent import Agent
from atelier.engine.transport import Transport
from atelier.products.product import Product
from atelier.protocol.messages import Announce, Assign, Confirm, Message

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Atelier"


def build_backlog(count: int, skill_count: int, prefix: str = "Product") -> list[Product]:
    """Products Product1..ProductN, each requiring skill1..skillK."""
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    return [Product.new(f"{prefix}{i}", skill_count) for i in range(1, count + 1)]


class CoordinatorAgent(Agent):
    """
    The atelier itself.

    Pops one backlog product per Announce and counts Confirms. It trusts
    every Confirm as-is: no check that the product was assigned, is really
    complete, or was not already confirmed by another worker.
    """

    def __init__(
        self,
        transport: Transport,
        products: Iterable[Product] = (),
        name: str = DEFAULT_NAME,
        mailbox: asyncio.Queue[Message] | None = None,
        processing_delay: float = 0.0,
    ) -> None:
        super().__init__(name, transport, mailbox=mailbox, processing_delay=processing_delay)
        self.pending: deque[Product] = deque(products)
        self.completed_count = 0
        self.message_count = 0
        self.assigned: dict[str, str] = {}  # product name -> worker
        self.confirmations: Counter[str] = Counter()
        self.announced: dict[str, dict[str, float]] = {}

    def on_start(self) -> None:
        logger.info("%s ready with %d products", self.name, len(self.pending))

    def on_stop(self) -> None:
        logger.info(
            "%s stopped: %d products completed, %d messages",
            self.name,
            self.completed_count,
            self.message_count,
        )

    def handle(self, message: Message) -> None:
        self.message_count += 1
        if isinstance(message, Announce):
            self.announced[message.sender] = dict(message.skills)
            logger.info("%s announced skills %s", message.sender, message.content)
            self._assign_next(message.sender)
        elif isinstance(message, Confirm):
            self.completed_count += 1
            self.confirmations[message.product_name] += 1
            logger.info(
                "%s completed by %s, total %d",
                message.product_name,
                message.sender,
                self.completed_count,
            )
        else:
            logger.debug("%s ignores %s from %s", self.name, message.kind, message.sender)

    def _assign_next(self, worker: str) -> None:
        if not self.pending:
            logger.info("Backlog empty, %s stays idle", worker)
            return
        product = self.pending.popleft()
        logger.info("Assigning %s to %s", product.name, worker)
        self.transport.send(worker, Assign.of(self.name, product))
        self.assigned[product.name] = worker
        self.message_count += 1

    @property
    def duplicate_confirmations(self) -> dict[str, int]:
        """Products confirmed more than once, with their confirm count."""
        return {name: n for name, n in self.confirmations.items() if n > 1}

    def stats(self) -> dict[str, Any]:
        return {
            "completed": self.completed_count,
            "messages": self.message_count,
            "assigned": len(self.assigned),
            "pending": len(self.pending),
            "distinct_completed": len(self.confirmations),
            "duplicate_confirmations": self.duplicate_confirmations,
        }
