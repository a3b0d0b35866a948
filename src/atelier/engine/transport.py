"""Transport - Delivers messages between agent mailboxes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Protocol

from atelier.protocol.messages import Message

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything agents can post messages through."""

    def send(self, recipient: str, message: Message) -> None: ...

    def broadcast(self, recipients: Iterable[str], message: Message) -> None: ...

    def mark_handled(self) -> None: ...


class LocalTransport:
    """
    In-process transport over asyncio queues.

    The directory (name -> mailbox) is fixed at construction. Delivery is
    reliable and FIFO per sender/receiver pair. The transport also tracks how
    many delivered messages are still unhandled so the runtime can tell when
    the system has gone quiet.
    """

    def __init__(self, directory: Mapping[str, asyncio.Queue[Message]]) -> None:
        self._directory = dict(directory)
        self._in_flight = 0
        self._quiet = asyncio.Event()
        self._quiet.set()
        self.delivered = 0

    @property
    def names(self) -> list[str]:
        return list(self._directory)

    @property
    def in_flight(self) -> int:
        return self._in_flight

    def send(self, recipient: str, message: Message) -> None:
        mailbox = self._directory.get(recipient)
        if mailbox is None:
            logger.warning("No agent named %s, dropping %s", recipient, message.kind)
            return
        self._in_flight += 1
        self._quiet.clear()
        self.delivered += 1
        mailbox.put_nowait(message)

    def broadcast(self, recipients: Iterable[str], message: Message) -> None:
        for recipient in recipients:
            self.send(recipient, message)

    def mark_handled(self) -> None:
        """Called by an agent loop once a message has been fully processed."""
        self._in_flight -= 1
        if self._in_flight <= 0:
            self._in_flight = 0
            self._quiet.set()

    async def wait_quiet(self) -> None:
        """Block until every delivered message has been handled."""
        while True:
            await self._quiet.wait()
            # Let agents woken by the last delivery run before re-checking
            await asyncio.sleep(0)
            if self._in_flight == 0:
                return


class RecordingTransport:
    """Transport that keeps every outgoing message instead of delivering it."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, Message]] = []

    def send(self, recipient: str, message: Message) -> None:
        self.sent.append((recipient, message))

    def broadcast(self, recipients: Iterable[str], message: Message) -> None:
        for recipient in recipients:
            self.send(recipient, message)

    def mark_handled(self) -> None:
        pass

    def to(self, recipient: str) -> list[Message]:
        return [m for r, m in self.sent if r == recipient]

    def clear(self) -> None:
        self.sent.clear()
