"""
Message Protocol

The four message kinds exchanged in the atelier:

- Announce:    worker -> coordinator, skill summary
- Assign:      coordinator -> worker, serialized product
- HelpRequest: worker -> every other worker, failed skill + serialized product
- Confirm:     worker -> coordinator, name of a finished product
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar

from atelier.products.product import DecodeError, Product


class MessageKind(StrEnum):
    """Message kinds."""

    ANNOUNCE = "announce"
    ASSIGN = "assign"
    HELP_REQUEST = "help_request"
    CONFIRM = "confirm"


@dataclass(frozen=True)
class Announce:
    """A worker introducing itself and its skills to the coordinator."""

    kind: ClassVar[MessageKind] = MessageKind.ANNOUNCE

    sender: str
    skills: dict[str, float] = field(default_factory=dict)

    @property
    def content(self) -> str:
        pairs = ", ".join(f"{skill}={p:.2f}" for skill, p in self.skills.items())
        return f"{{{pairs}}}"


@dataclass(frozen=True)
class Assign:
    """The coordinator handing a product to a worker."""

    kind: ClassVar[MessageKind] = MessageKind.ASSIGN

    sender: str
    product: str  # Product.serialize() output

    @property
    def content(self) -> str:
        return self.product

    @classmethod
    def of(cls, sender: str, product: Product) -> Assign:
        return cls(sender, product.serialize())


@dataclass(frozen=True)
class HelpRequest:
    """A worker asking its peers to apply one skill to a product."""

    kind: ClassVar[MessageKind] = MessageKind.HELP_REQUEST

    sender: str
    skill: str
    product: str  # Product.serialize() output

    @property
    def content(self) -> str:
        return f"{self.skill},{self.product}"

    @classmethod
    def of(cls, sender: str, skill: str, product: Product) -> HelpRequest:
        return cls(sender, skill, product.serialize())

    @classmethod
    def from_content(cls, sender: str, content: str) -> HelpRequest:
        """
        Parse `skillName,serializedProduct`.

        Raises:
            DecodeError: if the skill name or product part is missing
        """
        skill, sep, product = content.partition(",")
        if not sep or not skill.strip() or not product:
            raise DecodeError(f"malformed help request {content!r}")
        return cls(sender, skill.strip(), product)


@dataclass(frozen=True)
class Confirm:
    """A worker reporting a finished product to the coordinator."""

    kind: ClassVar[MessageKind] = MessageKind.CONFIRM

    sender: str
    product_name: str

    @property
    def content(self) -> str:
        return self.product_name


Message = Announce | Assign | HelpRequest | Confirm
