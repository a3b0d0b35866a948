"""
Worker Agent - Applies skills to products and delegates on failure.

Each worker holds a skill -> success probability profile and at most one
product at a time. Execution walks the product's missing skills in order:

1. Known skill and a fresh draw below its probability: apply it, move on
2. Anything else: broadcast a HelpRequest for that skill to every peer,
   drop the product and go back to idle
3. All skills applied: Confirm the product to the coordinator

A worker answering a HelpRequest tries the named skill exactly once and
never re-broadcasts, so a product that needs several helpers can stall.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any, Protocol

from atelier.engine.agent import Agent
from atelier.engine.transport import Transport
from atelier.products.product import DecodeError, Product, skill_name
from atelier.protocol.messages import Announce, Assign, Confirm, HelpRequest, Message

logger = logging.getLogger(__name__)

# Skill probabilities are drawn from [MIN_PROBABILITY, 1.0)
MIN_PROBABILITY = 0.5


class DrawSource(Protocol):
    """Source of uniform draws in [0, 1). random.Random satisfies it."""

    def random(self) -> float: ...


class WorkerState(StrEnum):
    """Task states of a worker."""

    IDLE = "idle"
    EXECUTING = "executing"


@dataclass
class WorkerStats:
    """Counters kept by a worker over its lifetime."""

    tasks_received: int = 0
    busy_rejections: int = 0
    skills_applied: int = 0
    skills_failed: int = 0
    delegations: int = 0
    help_given: int = 0
    help_declined: int = 0
    confirms_sent: int = 0
    messages_sent: int = 0
    decode_errors: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def generate_skills(skill_count: int, rng: DrawSource) -> dict[str, float]:
    """Draw a probability in [0.5, 1.0) for each of skill1..skillN."""
    span = 1.0 - MIN_PROBABILITY
    return {skill_name(i): MIN_PROBABILITY + span * rng.random() for i in range(1, skill_count + 1)}


class WorkerAgent(Agent):
    """A robot in the atelier."""

    def __init__(
        self,
        name: str,
        transport: Transport,
        *,
        coordinator: str,
        peers: Sequence[str] = (),
        skills: Mapping[str, float] | None = None,
        skill_count: int = 3,
        rng: DrawSource | None = None,
        mailbox: asyncio.Queue[Message] | None = None,
        processing_delay: float = 0.0,
    ) -> None:
        super().__init__(name, transport, mailbox=mailbox, processing_delay=processing_delay)
        self.rng: DrawSource = rng if rng is not None else random.Random()
        if skills is None:
            skills = generate_skills(skill_count, self.rng)
        self.skills: dict[str, float] = dict(skills)
        self.coordinator = coordinator
        self.peers = tuple(peer for peer in peers if peer != name)
        self.current_task: Product | None = None
        self.stats = WorkerStats()

    @property
    def task_state(self) -> WorkerState:
        return WorkerState.IDLE if self.current_task is None else WorkerState.EXECUTING

    def on_start(self) -> None:
        logger.info("%s starting with %d skills", self.name, len(self.skills))
        self.announce()

    def on_stop(self) -> None:
        logger.debug("%s stopped: %s", self.name, self.stats.to_dict())

    def announce(self) -> None:
        """Tell the coordinator which skills this worker has."""
        self._send(self.coordinator, Announce(self.name, dict(self.skills)))

    def handle(self, message: Message) -> None:
        if isinstance(message, Assign):
            self._on_assign(message)
        elif isinstance(message, HelpRequest):
            self._on_help_request(message)
        else:
            logger.debug("%s ignores %s from %s", self.name, message.kind, message.sender)

    def execute_task(self) -> None:
        """
        Work the current task until it completes or a skill fails.

        The worker is idle again when this returns, whatever the outcome.
        """
        product = self.current_task
        if product is None:
            return
        try:
            for skill in product.required_skills():
                if not self.attempt(skill):
                    self.stats.skills_failed += 1
                    logger.info("%s failed %s on %s", self.name, skill, product.name)
                    self.delegate(skill, product)
                    return
                product.apply_skill(skill)
                self.stats.skills_applied += 1
                logger.info("%s applied %s on %s", self.name, skill, product.name)

            if product.is_complete():
                logger.info("%s finished %s", self.name, product.name)
                self._confirm(product)
        finally:
            self.current_task = None

    def attempt(self, skill: str) -> bool:
        """One try at a skill. Unknown skills fail without consuming a draw."""
        probability = self.skills.get(skill)
        if probability is None:
            return False
        return self.rng.random() < probability

    def delegate(self, skill: str, product: Product) -> None:
        """Broadcast the failed skill and the product state to every peer."""
        if not self.peers:
            logger.warning("%s has no peers to help with %s, %s stalls", self.name, skill, product.name)
            return
        logger.info("%s asks %d peers for %s on %s", self.name, len(self.peers), skill, product.name)
        self.stats.delegations += 1
        request = HelpRequest.of(self.name, skill, product)
        self.transport.broadcast(self.peers, request)
        self.stats.messages_sent += len(self.peers)

    def _on_assign(self, message: Assign) -> None:
        if self.current_task is not None:
            self.stats.busy_rejections += 1
            logger.info("%s is busy with %s, dropping assignment", self.name, self.current_task.name)
            return

        product = self._decode(message.product, message)
        if product is None:
            return

        self.stats.tasks_received += 1
        logger.info("%s received %s", self.name, product.name)
        self.current_task = product
        self.execute_task()

    def _on_help_request(self, message: HelpRequest) -> None:
        if self.current_task is not None:
            self.stats.busy_rejections += 1
            logger.debug("%s is busy, cannot help %s", self.name, message.sender)
            return

        product = self._decode(message.product, message)
        if product is None:
            return

        if not self.attempt(message.skill):
            self.stats.help_declined += 1
            logger.debug("%s cannot help with %s on %s", self.name, message.skill, product.name)
            return

        product.apply_skill(message.skill)
        self.stats.help_given += 1
        logger.info("%s helped %s with %s on %s", self.name, message.sender, message.skill, product.name)
        if product.is_complete():
            logger.info("%s finished %s after helping", self.name, product.name)
            self._confirm(product)

    def _decode(self, payload: str, message: Message) -> Product | None:
        try:
            return Product.deserialize(payload)
        except DecodeError as e:
            self.stats.decode_errors += 1
            logger.warning("%s dropped %s from %s: %s", self.name, message.kind, message.sender, e)
            return None

    def _confirm(self, product: Product) -> None:
        self.stats.confirms_sent += 1
        self._send(self.coordinator, Confirm(self.name, product.name))

    def _send(self, recipient: str, message: Message) -> None:
        self.transport.send(recipient, message)
        self.stats.messages_sent += 1

    def summary(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "skills": {skill: round(p, 3) for skill, p in self.skills.items()},
            "state": self.task_state.value,
            **self.stats.to_dict(),
        }
